"""
rules.py
Helper functions for the throw and showdown rules.
Related modules:
- engine.py: Uses face_index and resolve_winner during the throw phases.
"""

from .state import HOUSE, PLAYER


def face_index(committed: int, supplied: int, faces: int = 6) -> int:
    """
    Combine the committed and supplied numbers into a face index.
    Neither side can choose the result alone: it depends on both contributions.
    """
    return (committed + supplied) % faces


def resolve_winner(player_value: int, house_value: int) -> str:
    """
    Strictly greater wins; a tie goes to the house.
    """
    if player_value > house_value:
        return PLAYER
    return HOUSE
