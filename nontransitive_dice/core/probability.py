"""
probability.py
Computes pairwise win probabilities for a dice set.
Related modules:
- engine.py: Computes the matrix once per round and shows it on help requests.
- agents/counter_agent.py: Picks the dice that best answers the player's choice.
"""

from typing import List, Tuple

from .dice import Dice, DiceSet

ProbabilityMatrix = Tuple[Tuple[float, ...], ...]


def count_wins(dice_a: Dice, dice_b: Dice) -> int:
    """
    Count face pairs (a, b) with a strictly greater than b.
    Ties are not wins.
    """
    return sum(1 for a in dice_a.faces for b in dice_b.faces if a > b)


def win_probability(dice_a: Dice, dice_b: Dice) -> float:
    """
    Probability that a random face of dice_a beats a random face of dice_b.
    Tied pairs count in the denominator only, so a dice against itself is generally not 0.5.
    Args:
        dice_a (Dice): The dice whose win is measured.
        dice_b (Dice): The opposing dice.
    Returns:
        float: wins / (faces_a * faces_b).
    """
    total = len(dice_a.faces) * len(dice_b.faces)
    return count_wins(dice_a, dice_b) / total


def probability_matrix(dice_set: DiceSet) -> ProbabilityMatrix:
    """
    Build the n x n matrix where entry (i, j) is win_probability(dice_set[i], dice_set[j]).
    Every ordered pair is computed, including the diagonal.
    """
    rows: List[Tuple[float, ...]] = []
    for dice_a in dice_set:
        rows.append(tuple(win_probability(dice_a, dice_b) for dice_b in dice_set))
    return tuple(rows)
