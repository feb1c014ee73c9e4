import unittest
from fractions import Fraction
from nontransitive_dice.core.dice import dice_set_from_faces
from nontransitive_dice.core.probability import count_wins, win_probability, probability_matrix

DICE = [(2, 2, 4, 4, 9, 9), (6, 8, 1, 1, 8, 6), (7, 5, 3, 7, 5, 3)]


class TestProbability(unittest.TestCase):
    def setUp(self):
        self.dice_set = dice_set_from_faces(DICE)

    def test_known_pair(self):
        self.assertEqual(count_wins(self.dice_set[0], self.dice_set[1]), 20)
        self.assertAlmostEqual(win_probability(self.dice_set[0], self.dice_set[1]), 20 / 36)

    def test_self_comparison_is_not_half(self):
        p = win_probability(self.dice_set[0], self.dice_set[0])
        self.assertAlmostEqual(p, 12 / 36)
        self.assertNotAlmostEqual(p, 0.5)

    def test_matrix_shape_and_diagonal(self):
        matrix = probability_matrix(self.dice_set)
        self.assertEqual(len(matrix), 3)
        self.assertTrue(all(len(row) == 3 for row in matrix))
        for i in range(3):
            expected = Fraction(count_wins(self.dice_set[i], self.dice_set[i]), 36)
            self.assertAlmostEqual(matrix[i][i], float(expected))

    def test_matrix_is_not_assumed_symmetric(self):
        dice_set = dice_set_from_faces([(1, 2, 3, 4, 5, 6), (3, 3, 3, 3, 3, 3), (0, 0, 0, 0, 0, 0)])
        matrix = probability_matrix(dice_set)
        self.assertAlmostEqual(matrix[0][1], 18 / 36)
        self.assertAlmostEqual(matrix[1][0], 12 / 36)
        # ties count in the denominator of both directions
        self.assertNotAlmostEqual(matrix[0][1] + matrix[1][0], 1.0)
        self.assertEqual(matrix[1][1], 0.0)

    def test_non_transitive_cycle(self):
        matrix = probability_matrix(self.dice_set)
        self.assertGreater(matrix[0][1], 0.5)
        self.assertGreater(matrix[1][2], 0.5)
        self.assertGreater(matrix[2][0], 0.5)


if __name__ == '__main__':
    unittest.main()
