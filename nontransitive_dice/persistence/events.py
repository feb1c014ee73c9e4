"""
events.py
Defines the GameEvent dataclass for recording a round's public transcript.
Used by recorder.py and the CLI to keep every published digest and reveal for later verification.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class GameEvent:
    """
    Represents a single event in the round (e.g., commitment published, throw resolved, round ended).
    Fields:
        game_id (str): Unique round identifier.
        event_type (str): Type of event (e.g., 'CommitRevealed').
        payload (dict): Event-specific data.
        player_type (str|None): Agent class name or 'Human' for the party the event concerns (optional).
    """
    game_id: str
    event_type: str
    payload: Dict[str, Any]
    player_type: str = None

    @classmethod
    def from_engine(cls, game_id: str, event: Dict[str, Any], player_type: str = None) -> "GameEvent":
        """Wrap an engine event dict; the 'type' key becomes event_type."""
        payload = {k: v for k, v in event.items() if k != "type"}
        return cls(game_id=game_id, event_type=event.get("type", "Unknown"), payload=payload, player_type=player_type)
