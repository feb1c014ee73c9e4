"""
state.py
Defines the mutable RoundState owned by the engine for one round, and the phase names it moves through.
Related modules:
- engine.py: Mutates RoundState during the round.
- fairness.py: Commitment objects are held here while outstanding.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from .fairness import Commitment

DETERMINE_FIRST_MOVE = "DETERMINE_FIRST_MOVE"
CHOOSE_DICE = "CHOOSE_DICE"
HOUSE_THROW = "HOUSE_THROW"
PLAYER_THROW = "PLAYER_THROW"
RESOLVE = "RESOLVE"
ENDED = "ENDED"
ABORTED = "ABORTED"

HOUSE = "house"
PLAYER = "player"


@dataclass
class Throw:
    """
    Result of one fair throw.
    Fields:
        committed (int): Number committed by the house generator.
        supplied (int): Number added by the counterparty.
        face_index (int): (committed + supplied) mod faces.
        value (int): Face value at face_index on the thrower's dice.
    """
    committed: int
    supplied: int
    face_index: int
    value: int


@dataclass
class RoundState:
    """
    Everything the engine tracks during one round.
    Fields:
        phase (str): Current phase (DETERMINE_FIRST_MOVE ... ENDED | ABORTED).
        player_moves_first (bool|None): Outcome of the first-move guess.
        house_dice_index (int|None): Dice the house plays.
        player_dice_index (int|None): Dice the player chose.
        outstanding (dict): Commitments published but not yet revealed, keyed by purpose.
        throws (dict): Resolved throws keyed by HOUSE / PLAYER.
        winner (str|None): HOUSE, PLAYER, or None while running or when aborted.
    """
    phase: str = DETERMINE_FIRST_MOVE
    player_moves_first: Optional[bool] = None
    house_dice_index: Optional[int] = None
    player_dice_index: Optional[int] = None
    outstanding: Dict[str, Commitment] = field(default_factory=dict)
    throws: Dict[str, Throw] = field(default_factory=dict)
    winner: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.phase in (ENDED, ABORTED)
