"""
config.py
Defines the GameConfig dataclass, which centralizes the numeric constraints of a non-transitive dice round.
Related modules:
- dice.py: Uses GameConfig to validate dice definitions.
- fairness.py: Uses key_bytes to size the HMAC key.
- engine.py: Uses GameConfig to drive the round and pick the house agent.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class GameConfig:
    """
    Centralizes all rule options and numeric constraints for a round.
    Fields:
        faces_per_dice (int): Number of faces every dice must have.
        min_dice (int): Minimum number of dice definitions required.
        house_default_index (int): Dice the house announces when it moves first.
        key_bytes (int): Size of the secret HMAC key (32 bytes = 256 bits).
        house_agent (str): Name of the house strategy in AGENT_MAP.
    """
    faces_per_dice: int = 6
    min_dice: int = 3
    house_default_index: int = 1
    key_bytes: int = 32
    house_agent: str = "counter"
