from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from doorprize.importer import CsvImportError
from doorprize.roster import CANDIDATES_KEY, WINNERS_KEY, Roster
from doorprize.session import COUNTDOWN_INTERVAL, DrawSession, Phase
from doorprize.storage import MemoryStorage
from doorprize.workflows import (
    CLEAR_CANDIDATES_PROMPT,
    CLEAR_WINNERS_PROMPT,
    DisplaySettings,
    can_draw,
    candidate_rows,
    clear_all_candidates,
    clear_all_winners,
    import_candidates,
    set_title,
    toggle_score_visibility,
    winner_rows,
)

from .fakes import ManualScheduler

CSV_TEXT = (
    "Name,Email,Phone,Institution,Institution Type,Total Score\n"
    "Alice,alice@example.com,0811,Univ A,University,50\n"
    "Bob,bob@example.com,0812,,,850\n"
)


class WorkflowTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.csv_path = Path(self._tmpdir.name) / "users.csv"
        self.csv_path.write_text(CSV_TEXT, encoding="utf-8")
        self.storage = MemoryStorage()
        self.scheduler = ManualScheduler()
        self.session = DrawSession(Roster(self.storage), self.scheduler)
        self.prompts: list[str] = []

    def tearDown(self) -> None:
        self.session.close()
        self._tmpdir.cleanup()

    def _confirm(self, answer: bool):
        def _ask(prompt: str) -> bool:
            self.prompts.append(prompt)
            return answer

        return _ask

    def _draw(self) -> None:
        self.assertTrue(self.session.start_draw())
        self.scheduler.fire(COUNTDOWN_INTERVAL, times=5)

    def test_import_replaces_pool(self) -> None:
        result = import_candidates(self.session, self.csv_path)
        self.assertTrue(result.ok)
        self.assertEqual(
            [c.name for c in self.session.roster.candidates], ["Alice", "Bob"]
        )
        self.assertEqual(len(self.storage.load(CANDIDATES_KEY)), 2)

        self.csv_path.write_text("Name,Total Score\nCarl,10\n", encoding="utf-8")
        import_candidates(self.session, self.csv_path)
        self.assertEqual([c.name for c in self.session.roster.candidates], ["Carl"])

    def test_import_stops_running_draw(self) -> None:
        import_candidates(self.session, self.csv_path)
        self.session.start_draw()
        import_candidates(self.session, self.csv_path)
        self.assertIs(self.session.phase, Phase.IDLE)
        self.assertEqual(self.scheduler.active(), [])

    def test_import_with_bad_header_keeps_pool(self) -> None:
        import_candidates(self.session, self.csv_path)
        bad = Path(self._tmpdir.name) / "bad.csv"
        bad.write_text("Who,Points\nAlice,1\n", encoding="utf-8")
        with self.assertRaises(CsvImportError):
            import_candidates(self.session, bad)
        self.assertEqual(len(self.session.roster.candidates), 2)

    def test_can_draw(self) -> None:
        self.assertFalse(can_draw(self.session))
        import_candidates(self.session, self.csv_path)
        self.assertTrue(can_draw(self.session))
        self.session.start_draw()
        self.assertFalse(can_draw(self.session))

    def test_cannot_draw_once_everyone_has_won(self) -> None:
        import_candidates(self.session, self.csv_path)
        self._draw()
        self.assertTrue(can_draw(self.session))
        self._draw()
        self.assertFalse(can_draw(self.session))
        self.assertTrue(clear_all_winners(self.session, self._confirm(True)))
        self.assertTrue(can_draw(self.session))

    def test_clear_winners_requires_confirmation(self) -> None:
        import_candidates(self.session, self.csv_path)
        self._draw()
        self.assertFalse(clear_all_winners(self.session, self._confirm(False)))
        self.assertEqual(len(self.session.roster.winners), 1)
        self.assertIs(self.session.phase, Phase.RESULT)

        self.assertTrue(clear_all_winners(self.session, self._confirm(True)))
        self.assertEqual(self.session.roster.winners, [])
        self.assertIsNone(self.storage.load(WINNERS_KEY))
        self.assertIs(self.session.phase, Phase.IDLE)
        self.assertEqual(self.prompts, [CLEAR_WINNERS_PROMPT, CLEAR_WINNERS_PROMPT])

    def test_clear_candidates_requires_confirmation(self) -> None:
        import_candidates(self.session, self.csv_path)
        self.assertFalse(clear_all_candidates(self.session, self._confirm(False)))
        self.assertTrue(self.session.roster.has_candidates())

        self.session.start_draw()
        self.assertTrue(clear_all_candidates(self.session, self._confirm(True)))
        self.assertFalse(self.session.roster.has_candidates())
        self.assertIsNone(self.storage.load(CANDIDATES_KEY))
        self.assertIs(self.session.phase, Phase.IDLE)
        self.assertEqual(self.prompts[-1], CLEAR_CANDIDATES_PROMPT)

    def test_candidate_rows_hide_scores_by_default(self) -> None:
        import_candidates(self.session, self.csv_path)
        settings = DisplaySettings(title="Doorprize")
        rows = candidate_rows(self.session, settings)
        self.assertEqual([row.institution for row in rows], ["Univ A", "-"])
        self.assertTrue(all(row.score is None and row.odds is None for row in rows))

    def test_candidate_rows_fall_back_to_institution_type(self) -> None:
        self.csv_path.write_text(
            "Name,Email,Phone,Institution Type,Total Score\n"
            "Alice,,,University,50\n"
            "Bob,,,,850\n",
            encoding="utf-8",
        )
        import_candidates(self.session, self.csv_path)
        rows = candidate_rows(self.session, DisplaySettings(title="Doorprize"))
        self.assertEqual([row.institution for row in rows], ["University", "-"])

    def test_candidate_rows_with_scores(self) -> None:
        import_candidates(self.session, self.csv_path)
        settings = DisplaySettings(title="Doorprize")
        self.assertTrue(toggle_score_visibility(settings))
        alice, bob = candidate_rows(self.session, settings)
        self.assertEqual(alice.score, 50)
        self.assertEqual(bob.score, 850)
        self.assertAlmostEqual(alice.odds, 1 / 301)
        self.assertAlmostEqual(bob.odds, 300 / 301)
        self.assertFalse(toggle_score_visibility(settings))

    def test_winner_rows_are_numbered(self) -> None:
        import_candidates(self.session, self.csv_path)
        self._draw()
        self._draw()
        rows = winner_rows(self.session)
        self.assertEqual([row.position for row in rows], [1, 2])
        self.assertEqual(sorted(row.name for row in rows), ["Alice", "Bob"])

    def test_set_title(self) -> None:
        settings = DisplaySettings(title="Old")
        set_title(settings, "Grand Prize Draw")
        self.assertEqual(settings.title, "Grand Prize Draw")


if __name__ == "__main__":
    unittest.main()
