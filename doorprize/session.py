"""Draw session state machine: idle -> drawing -> result."""

from __future__ import annotations

import enum
import logging
import random
from typing import Callable, Optional

from .candidate import Candidate
from .prize_draw.selection import (
    InvalidSelectionPool,
    NoEligibleCandidates,
    select_winner,
)
from .prize_draw.weighting import WeightingScheme
from .roster import Roster
from .scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_COUNTDOWN_SECONDS = 5
COUNTDOWN_INTERVAL = 1.0
PREVIEW_INTERVAL = 0.05


class Phase(str, enum.Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    RESULT = "result"


class DrawSession:
    """Runs countdown draws against a :class:`Roster`.

    While drawing, two timers owned by the session tick concurrently: the
    countdown (every second) and the preview index used to cycle through
    names on screen (every 50 ms). Both are cancelled whenever the session
    leaves the ``drawing`` phase or is closed.
    """

    def __init__(
        self,
        roster: Roster,
        scheduler: Scheduler,
        *,
        countdown_seconds: int = DEFAULT_COUNTDOWN_SECONDS,
        rng: Optional[random.Random] = None,
        scheme: Optional[WeightingScheme] = None,
        on_change: Optional[Callable[["DrawSession"], None]] = None,
    ) -> None:
        """Create an idle session.

        Parameters
        ----------
        roster : Roster
            Candidate pool and winners history to draw from and record into.
        scheduler : Scheduler
            Source of the repeating countdown and preview timers.
        countdown_seconds : int, default: 5
            Seconds counted down before a winner is selected.
        rng : Optional[random.Random], default: None
            Random source forwarded to :func:`select_winner`.
        scheme : Optional[WeightingScheme], default: None
            Weighting scheme forwarded to :func:`select_winner`.
        on_change : Optional[Callable[[DrawSession], None]], default: None
            Listener invoked after every state change, e.g. to redraw a view.
        """
        if countdown_seconds < 0:
            raise ValueError("countdown_seconds must be non-negative")
        self.roster = roster
        self._scheduler = scheduler
        self._countdown_start = countdown_seconds
        self._rng = rng
        self._scheme = scheme
        self.on_change = on_change

        self.phase = Phase.IDLE
        self.countdown = countdown_seconds
        self.preview_index = 0
        self.winner: Optional[Candidate] = None
        self.last_error: Optional[Exception] = None
        self._countdown_timer: Optional[TimerHandle] = None
        self._preview_timer: Optional[TimerHandle] = None
        self._closed = False

    @property
    def timers_active(self) -> bool:
        return any(
            timer is not None and timer.active
            for timer in (self._countdown_timer, self._preview_timer)
        )

    @property
    def preview_candidate(self) -> Optional[Candidate]:
        """Name currently flashed on screen while drawing."""
        if self.phase is not Phase.DRAWING:
            return None
        pool = self.roster.eligible()
        if not pool:
            return None
        return pool[self.preview_index % len(pool)]

    def start_draw(self) -> bool:
        """Enter the ``drawing`` phase from ``idle`` or ``result``.

        Returns
        -------
        bool
            ``False`` when the candidate pool is empty (nothing happens) or a
            draw is already running; ``True`` once the countdown has started.

        Raises
        ------
        NoEligibleCandidates
            If candidates were imported but all of them have already won.
        RuntimeError
            If the session has been closed.
        """
        if self._closed:
            raise RuntimeError("Draw session has been closed")
        if self.phase is Phase.DRAWING:
            return False
        if not self.roster.has_candidates():
            logger.debug("Draw refused: candidate pool is empty")
            return False
        if not self.roster.eligible():
            raise NoEligibleCandidates("Every candidate has already won")

        self.countdown = self._countdown_start
        self.preview_index = 0
        self.winner = None
        self.last_error = None
        self.phase = Phase.DRAWING
        logger.info(f"Draw started with a {self.countdown}s countdown")

        if self.countdown <= 0:
            self._finish()
            return True

        self._countdown_timer = self._scheduler.call_every(
            COUNTDOWN_INTERVAL, self._on_countdown_tick
        )
        self._preview_timer = self._scheduler.call_every(
            PREVIEW_INTERVAL, self._on_preview_tick
        )
        self._notify()
        return True

    def reset(self) -> None:
        """Return to ``idle``, stopping any running countdown."""
        self._cancel_timers()
        self.phase = Phase.IDLE
        self.countdown = self._countdown_start
        self.preview_index = 0
        self.winner = None
        self._notify()

    def clear_winners(self) -> None:
        """Forget every winner and go back to ``idle``."""
        self.roster.clear_winners()
        self.last_error = None
        self.reset()

    def clear_candidates(self) -> None:
        """Drop the candidate pool and go back to ``idle``."""
        self.roster.clear_candidates()
        self.reset()

    def close(self) -> None:
        """Stop the timers for good; the session cannot draw afterwards."""
        self._cancel_timers()
        self._closed = True

    def _on_countdown_tick(self) -> None:
        if self.phase is not Phase.DRAWING:
            return
        self.countdown = max(self.countdown - 1, 0)
        if self.countdown == 0:
            self._finish()
        else:
            self._notify()

    def _on_preview_tick(self) -> None:
        if self.phase is not Phase.DRAWING:
            return
        size = len(self.roster.eligible())
        self.preview_index = (self.preview_index + 1) % size if size else 0
        self._notify()

    def _finish(self) -> None:
        self._cancel_timers()
        eligible = self.roster.eligible()
        try:
            if not eligible:
                raise NoEligibleCandidates("No eligible candidates left to draw")
            winner = select_winner(eligible, rng=self._rng, scheme=self._scheme)
        except InvalidSelectionPool as exc:
            logger.warning(f"Draw aborted: {exc}")
            self._abort(exc)
            return

        try:
            self.roster.record_winner(winner)
        except Exception as exc:
            logger.exception(f"Could not record winner {winner.name!r}")
            self._abort(exc)
            return
        self.winner = winner
        self.phase = Phase.RESULT
        self._notify()

    def _abort(self, error: Exception) -> None:
        self.last_error = error
        self.phase = Phase.IDLE
        self.countdown = self._countdown_start
        self.preview_index = 0
        self._notify()

    def _cancel_timers(self) -> None:
        for timer in (self._countdown_timer, self._preview_timer):
            if timer is not None:
                timer.cancel()
        self._countdown_timer = None
        self._preview_timer = None

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self)


__all__ = [
    "COUNTDOWN_INTERVAL",
    "DEFAULT_COUNTDOWN_SECONDS",
    "DrawSession",
    "PREVIEW_INTERVAL",
    "Phase",
]
