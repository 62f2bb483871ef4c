"""Run countdown draws from the terminal against the configured database.

Usage examples:
  python scripts/run_draw.py --import participants.csv
  python scripts/run_draw.py --draws 3
  python scripts/run_draw.py --clear-winners
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from doorprize.config import load_settings
from doorprize.db.engine import get_sessionmaker, make_engine
from doorprize.importer import CsvImportError
from doorprize.prize_draw import NoEligibleCandidates
from doorprize.roster import Roster
from doorprize.scheduling import AsyncioScheduler
from doorprize.session import DrawSession, Phase
from doorprize.storage import SqlStorage
from doorprize.workflows import (
    DisplaySettings,
    candidate_rows,
    clear_all_candidates,
    clear_all_winners,
    import_candidates,
    winner_rows,
)


def _confirm(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N] ")
    return answer.strip().lower() in {"y", "yes"}


def _render(session: DrawSession) -> None:
    if session.phase is Phase.DRAWING:
        current = session.preview_candidate
        name = current.name if current is not None else ""
        sys.stdout.write(f"\rDrawing... {session.countdown} seconds left  {name:<40}")
        sys.stdout.flush()


async def _draw_once(session: DrawSession) -> None:
    done = asyncio.Event()
    previous = session.on_change

    def _listener(current: DrawSession) -> None:
        _render(current)
        if current.phase is not Phase.DRAWING:
            done.set()

    session.on_change = _listener
    try:
        if not session.start_draw():
            print("Nothing to draw: import candidates first.")
            return
        await done.wait()
    finally:
        session.on_change = previous

    print()
    if session.winner is not None:
        print(f"The Winner is  {session.winner.name}")
    elif session.last_error is not None:
        print(f"No winner: {session.last_error}")


async def _run(args: argparse.Namespace) -> int:
    settings = load_settings()
    engine = make_engine(settings.database_url, create_schema=True)
    storage = SqlStorage(get_sessionmaker(engine))
    display = DisplaySettings(
        title=args.title or settings.title,
        show_score=args.show_score or settings.show_score,
    )
    session = DrawSession(
        Roster(storage),
        AsyncioScheduler(),
        countdown_seconds=settings.countdown_seconds,
    )
    try:
        if args.clear_candidates:
            clear_all_candidates(session, _confirm)
        if args.clear_winners:
            clear_all_winners(session, _confirm)
        if args.import_path:
            try:
                result = import_candidates(session, args.import_path)
            except CsvImportError as exc:
                print(f"Import failed: {exc}", file=sys.stderr)
                return 1
            for error in result.errors:
                print(f"line {error.line_number}: {error.message}", file=sys.stderr)

        print(display.title)
        if args.list:
            rows = candidate_rows(session, display)
            print(f"Users List ({len(rows)})")
            for row in rows:
                extra = ""
                if display.show_score:
                    extra = f"  score={row.score}  odds={row.odds:.2%}"
                print(f"  {row.name} ({row.institution}){extra}")

        for _ in range(args.draws):
            try:
                await _draw_once(session)
            except NoEligibleCandidates as exc:
                print(f"No winner: {exc}")
                break

        print("Winners:")
        for row in winner_rows(session):
            print(f"  {row.position}. {row.name}")
    finally:
        session.close()
        engine.dispose()
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Weighted doorprize draw")
    parser.add_argument("--import", dest="import_path", help="CSV file of candidates")
    parser.add_argument("--draws", type=int, default=0, help="number of draws to run")
    parser.add_argument("--title", help="display title override")
    parser.add_argument("--show-score", action="store_true", help="show scores and odds")
    parser.add_argument("--list", action="store_true", help="list imported candidates")
    parser.add_argument("--clear-candidates", action="store_true")
    parser.add_argument("--clear-winners", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
