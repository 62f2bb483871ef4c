from __future__ import annotations

import random
import unittest
from typing import Optional

from doorprize.importer import read_candidates_from_text
from doorprize.prize_draw import NoEligibleCandidates
from doorprize.roster import WINNERS_KEY, Roster
from doorprize.session import (
    COUNTDOWN_INTERVAL,
    PREVIEW_INTERVAL,
    DrawSession,
    Phase,
)
from doorprize.storage import MemoryStorage

from .fakes import FailingWinnersStorage, ManualScheduler


def _roster(
    csv_text: str = "Name,Total Score\nAlice,50\nBob,850\nCarl,250\n",
    storage: Optional[MemoryStorage] = None,
) -> Roster:
    roster = Roster(storage if storage is not None else MemoryStorage())
    roster.replace_candidates(read_candidates_from_text(csv_text).candidates)
    return roster


class DrawSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = ManualScheduler()
        self.storage = MemoryStorage()
        self.roster = _roster(storage=self.storage)
        self.changes: list[Phase] = []
        self.session = DrawSession(
            self.roster,
            self.scheduler,
            rng=random.Random(3),
            on_change=lambda session: self.changes.append(session.phase),
        )

    def _run_countdown(self) -> None:
        self.scheduler.fire(COUNTDOWN_INTERVAL, times=5)

    def test_starts_idle(self) -> None:
        self.assertIs(self.session.phase, Phase.IDLE)
        self.assertEqual(self.session.countdown, 5)
        self.assertIsNone(self.session.winner)
        self.assertIsNone(self.session.preview_candidate)

    def test_draw_with_empty_pool_is_noop(self) -> None:
        session = DrawSession(Roster(MemoryStorage()), self.scheduler)
        self.assertFalse(session.start_draw())
        self.assertIs(session.phase, Phase.IDLE)
        self.assertEqual(self.scheduler.timers, [])

    def test_start_draw_enters_drawing(self) -> None:
        self.assertTrue(self.session.start_draw())
        self.assertIs(self.session.phase, Phase.DRAWING)
        self.assertEqual(self.session.countdown, 5)
        self.assertEqual(self.session.preview_index, 0)
        intervals = sorted(timer.interval for timer in self.scheduler.active())
        self.assertEqual(intervals, [PREVIEW_INTERVAL, COUNTDOWN_INTERVAL])

    def test_start_draw_while_drawing_is_refused(self) -> None:
        self.session.start_draw()
        self.assertFalse(self.session.start_draw())
        self.assertEqual(len(self.scheduler.timers), 2)

    def test_countdown_ticks(self) -> None:
        self.session.start_draw()
        self.scheduler.fire(COUNTDOWN_INTERVAL, times=2)
        self.assertEqual(self.session.countdown, 3)
        self.assertIs(self.session.phase, Phase.DRAWING)

    def test_preview_cycles_through_eligible_pool(self) -> None:
        self.session.start_draw()
        names = []
        for _ in range(4):
            names.append(self.session.preview_candidate.name)
            self.scheduler.fire(PREVIEW_INTERVAL)
        self.assertEqual(names, ["Alice", "Bob", "Carl", "Alice"])
        self.assertEqual(self.session.preview_index, 1)

    def test_countdown_end_selects_winner(self) -> None:
        self.session.start_draw()
        self._run_countdown()
        self.assertIs(self.session.phase, Phase.RESULT)
        self.assertEqual(self.session.countdown, 0)
        self.assertIsNotNone(self.session.winner)
        self.assertEqual(self.roster.winners, [self.session.winner])
        self.assertEqual(self.scheduler.active(), [])
        self.assertEqual(self.changes[-1], Phase.RESULT)

    def test_each_draw_appends_a_new_winner(self) -> None:
        for expected in range(1, 4):
            self.assertTrue(self.session.start_draw())
            self._run_countdown()
            self.assertIs(self.session.phase, Phase.RESULT)
            self.assertEqual(len(self.roster.winners), expected)
        ids = [winner.id for winner in self.roster.winners]
        self.assertEqual(len(set(ids)), 3)

    def test_draw_again_resets_countdown(self) -> None:
        self.session.start_draw()
        self._run_countdown()
        self.assertTrue(self.session.start_draw())
        self.assertIs(self.session.phase, Phase.DRAWING)
        self.assertEqual(self.session.countdown, 5)
        self.assertEqual(self.session.preview_index, 0)
        self.assertIsNone(self.session.winner)

    def test_exhausted_pool_raises_on_start(self) -> None:
        for _ in range(3):
            self.session.start_draw()
            self._run_countdown()
        with self.assertRaises(NoEligibleCandidates):
            self.session.start_draw()
        self.assertIs(self.session.phase, Phase.RESULT)

    def test_pool_exhausted_during_countdown_returns_to_idle(self) -> None:
        self.session.start_draw()
        for candidate in self.roster.candidates:
            self.roster.record_winner(candidate)
        self._run_countdown()
        self.assertIs(self.session.phase, Phase.IDLE)
        self.assertIsInstance(self.session.last_error, NoEligibleCandidates)
        self.assertIsNone(self.session.winner)
        self.assertEqual(self.scheduler.active(), [])

    def test_zero_weight_pool_surfaces_error(self) -> None:
        session = DrawSession(
            _roster("Name,Total Score\nAlice,-1\nBob,nope\n"), self.scheduler
        )
        session.start_draw()
        self.scheduler.fire(COUNTDOWN_INTERVAL, times=5)
        self.assertIs(session.phase, Phase.IDLE)
        self.assertIsNotNone(session.last_error)
        self.assertEqual(session.roster.winners, [])

    def test_failed_winner_write_returns_to_idle(self) -> None:
        session = DrawSession(
            _roster(storage=FailingWinnersStorage()), self.scheduler, rng=random.Random(3)
        )
        session.start_draw()
        with self.assertLogs("doorprize.session", level="ERROR"):
            self.scheduler.fire(COUNTDOWN_INTERVAL, times=5)
        self.assertIs(session.phase, Phase.IDLE)
        self.assertIsInstance(session.last_error, OSError)
        self.assertIsNone(session.winner)
        self.assertEqual(session.roster.winners, [])
        self.assertFalse(session.timers_active)
        # The operator can try again straight away.
        self.assertTrue(session.start_draw())
        self.assertIs(session.phase, Phase.DRAWING)

    def test_stale_ticks_after_cancel_are_ignored(self) -> None:
        self.session.start_draw()
        countdown_timer, preview_timer = self.scheduler.timers
        self.session.reset()
        self.assertTrue(countdown_timer.cancelled)
        self.assertTrue(preview_timer.cancelled)
        # A tick that was already in flight fires anyway.
        countdown_timer.callback()
        preview_timer.callback()
        self.assertIs(self.session.phase, Phase.IDLE)
        self.assertEqual(self.session.countdown, 5)
        self.assertEqual(self.session.preview_index, 0)

    def test_clear_winners_resets_to_idle(self) -> None:
        self.session.start_draw()
        self._run_countdown()
        self.session.clear_winners()
        self.assertIs(self.session.phase, Phase.IDLE)
        self.assertIsNone(self.session.winner)
        self.assertEqual(self.roster.winners, [])
        self.assertIsNone(self.storage.load(WINNERS_KEY))

    def test_clear_winners_mid_draw_stops_timers(self) -> None:
        self.session.start_draw()
        self.session.clear_winners()
        self.assertIs(self.session.phase, Phase.IDLE)
        self.assertEqual(self.scheduler.active(), [])

    def test_clear_candidates_resets_to_idle(self) -> None:
        self.session.start_draw()
        self.session.clear_candidates()
        self.assertIs(self.session.phase, Phase.IDLE)
        self.assertFalse(self.roster.has_candidates())
        self.assertFalse(self.session.start_draw())

    def test_close_cancels_timers(self) -> None:
        self.session.start_draw()
        self.session.close()
        self.assertFalse(self.session.timers_active)
        with self.assertRaises(RuntimeError):
            self.session.start_draw()

    def test_zero_second_countdown_draws_immediately(self) -> None:
        session = DrawSession(self.roster, self.scheduler, countdown_seconds=0)
        self.assertTrue(session.start_draw())
        self.assertIs(session.phase, Phase.RESULT)
        self.assertEqual(self.scheduler.timers, [])

    def test_negative_countdown_rejected(self) -> None:
        with self.assertRaises(ValueError):
            DrawSession(self.roster, self.scheduler, countdown_seconds=-1)


if __name__ == "__main__":
    unittest.main()
