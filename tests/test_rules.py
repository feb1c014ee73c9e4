import secrets
import unittest
from collections import Counter

from nontransitive_dice.core.rules import face_index, resolve_winner
from nontransitive_dice.core.state import HOUSE, PLAYER


class TestRules(unittest.TestCase):
    def test_face_index_wraps(self):
        self.assertEqual(face_index(3, 4), 1)
        self.assertEqual(face_index(5, 5), 4)
        self.assertEqual(face_index(0, 0), 0)

    def test_any_supplied_value_permutes_faces(self):
        # for a fixed supplied number, uniform committed numbers map onto every face exactly once
        for supplied in range(6):
            self.assertEqual(sorted(face_index(c, supplied) for c in range(6)), list(range(6)))

    def test_simulated_distribution_is_uniform(self):
        trials = 60000
        for supplied in (0, 3, 5):
            counts = Counter(face_index(secrets.randbelow(6), supplied) for _ in range(trials))
            for face in range(6):
                self.assertAlmostEqual(counts[face] / trials, 1 / 6, delta=0.015)

    def test_strictly_greater_wins(self):
        self.assertEqual(resolve_winner(9, 8), PLAYER)
        self.assertEqual(resolve_winner(1, 8), HOUSE)

    def test_tie_goes_to_house(self):
        self.assertEqual(resolve_winner(7, 7), HOUSE)


if __name__ == '__main__':
    unittest.main()
