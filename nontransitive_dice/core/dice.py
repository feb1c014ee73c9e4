"""
dice.py
Defines the Dice and DiceSet models and the parser that turns raw definitions into them.
Related modules:
- probability.py: Compares faces of every pair of dice.
- engine.py: Looks up throw faces on the chosen dice.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from .config import GameConfig


class ValidationError(ValueError):
    """
    Raised when the dice definitions cannot form a valid dice set.
    """
    pass


@dataclass(frozen=True)
class Dice:
    """
    A single dice: an ordered tuple of face values.
    Args:
        faces (tuple[int, ...]): Face values; repeated and negative values are allowed.
    """
    faces: Tuple[int, ...]

    def __str__(self) -> str:
        return ",".join(str(f) for f in self.faces)

    def face(self, index: int) -> int:
        """Return the face value at the given face index."""
        return self.faces[index]


@dataclass(frozen=True)
class DiceSet:
    """
    Ordered, immutable collection of dice for a session, indexed 0..n-1.
    """
    dice: Tuple[Dice, ...]

    def __len__(self) -> int:
        return len(self.dice)

    def __getitem__(self, index: int) -> Dice:
        return self.dice[index]

    def __iter__(self):
        return iter(self.dice)

    def indices(self):
        return range(len(self.dice))


def parse_dice(definition: str, config: Optional[GameConfig] = None) -> Dice:
    """
    Parse one comma-separated definition such as "2,2,4,4,9,9".
    Args:
        definition (str): Raw definition.
        config (GameConfig, optional): Supplies the required face count.
    Returns:
        Dice: The parsed dice.
    Raises:
        ValidationError: If the face count is wrong or a token is not an integer.
    """
    config = config or GameConfig()
    tokens = [t.strip() for t in definition.split(",")]
    if len(tokens) != config.faces_per_dice:
        raise ValidationError(
            f"Each dice must have exactly {config.faces_per_dice} integer values, got {len(tokens)} in '{definition}'."
        )
    faces = []
    for token in tokens:
        try:
            faces.append(int(token))
        except ValueError:
            raise ValidationError(f"Dice value '{token}' in '{definition}' is not an integer.") from None
    return Dice(tuple(faces))


def parse_dice_sets(definitions: Sequence[str], config: Optional[GameConfig] = None) -> DiceSet:
    """
    Parse raw command-line definitions into a validated DiceSet.
    Args:
        definitions (list[str]): One definition per dice.
        config (GameConfig, optional): Rule constraints.
    Returns:
        DiceSet: The validated dice set.
    Raises:
        ValidationError: If fewer than min_dice definitions are given or any definition is malformed.
    """
    config = config or GameConfig()
    if len(definitions) < config.min_dice:
        raise ValidationError(
            f"Not enough dice configurations provided: expected at least {config.min_dice}, got {len(definitions)}."
        )
    return DiceSet(tuple(parse_dice(d, config) for d in definitions))


def dice_set_from_faces(faces: Iterable[Iterable[int]]) -> DiceSet:
    """Build a DiceSet directly from integer faces (tests and scripts)."""
    return DiceSet(tuple(Dice(tuple(f)) for f in faces))
