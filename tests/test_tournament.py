import contextlib
import io
import os
import tempfile
import unittest

from nontransitive_dice.core.config import GameConfig
from nontransitive_dice.core.dice import parse_dice_sets
from scripts.run_tournament import main, run_tournament

DICE = ["2,2,4,4,9,9", "6,8,1,1,8,6", "7,5,3,7,5,3"]


class TestTournamentScript(unittest.TestCase):
    """
    Tests for the simulation script:
      - every ordered pairing is played and each throw is counted once,
      - bad dice are reported through argparse instead of a traceback,
      - dice with negative faces are accepted after "--".
    """

    def test_every_ordered_pairing_is_played(self):
        rows, face_counts = run_tournament(parse_dice_sets(DICE), 20, GameConfig())
        self.assertEqual(len(rows), 6)
        for r in rows:
            self.assertEqual(r["wins_a"] + r["wins_b"] + r["ties"], 20)
        self.assertEqual(sum(face_counts.values()), 6 * 20 * 2)

    def test_invalid_dice_exit_through_argparse(self):
        err = io.StringIO()
        with contextlib.redirect_stderr(err), self.assertRaises(SystemExit) as cm:
            main(["--trials", "1", "--", "1,2,3", DICE[1], DICE[2]])
        self.assertEqual(cm.exception.code, 2)
        self.assertIn("exactly 6", err.getvalue())

    def test_negative_faces_after_separator(self):
        with tempfile.TemporaryDirectory() as d:
            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                main(["--trials", "3", "--data-dir", d, "--", "-1,2,3,4,5,6", DICE[0], DICE[1]])
            self.assertTrue(os.path.exists(os.path.join(d, "tournament_summary.csv")))
            self.assertTrue(os.path.exists(os.path.join(d, "tournament_win_rates.png")))
        self.assertIn("-1,2,3,4,5,6 vs 2,2,4,4,9,9", out.getvalue())


if __name__ == '__main__':
    unittest.main()
