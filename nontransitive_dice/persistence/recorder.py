"""
recorder.py
Implements event recording for a round. Used to keep the stream of GameEvent objects so that
either party can re-check every commitment after the round.
Related modules:
- events.py: Defines GameEvent type.
- serializer.py: Used for saving/loading events.
- core/fairness.py: verify_commitment recomputes revealed digests.
"""

from typing import Iterable, List

from .events import GameEvent
from ..core.fairness import verify_commitment


class InMemoryRecorder:
    """
    Records GameEvent objects in memory for later retrieval.
    Methods:
        record(event): Add a new event.
        events(): Get all recorded events.
        flush(): No-op for in-memory; used in file recorders.
    """
    def __init__(self):
        self._events: List[GameEvent] = []

    def record(self, event: GameEvent) -> None:
        """Add a new event to the recorder."""
        self._events.append(event)

    def events(self):
        """Return all recorded events as a list."""
        return list(self._events)

    def flush(self):
        """No-op for in-memory recorder."""
        pass


def verify_transcript(events: Iterable[GameEvent]) -> List[str]:
    """
    Match every CommitRevealed event with the CommitPublished event of the same round and purpose
    and recompute its digest. A transcript file may hold several rounds, so commitments are keyed
    by (game_id, purpose).
    Args:
        events (iterable[GameEvent]): Transcript of one or more rounds.
    Returns:
        list[str]: Human-readable problems; empty when every reveal matches its published digest.
            Malformed events are reported as problems, never raised.
    """
    published = {}
    problems = []
    for ev in events:
        payload = ev.payload if isinstance(ev.payload, dict) else {}
        purpose = payload.get("purpose")
        slot = (ev.game_id, purpose)
        try:
            if ev.event_type == "CommitPublished":
                published[slot] = str(payload["hmac"])
            elif ev.event_type == "CommitRevealed":
                if slot not in published:
                    problems.append(f"{purpose}: revealed without a published commitment")
                    continue
                key = bytes.fromhex(payload["key"])
                number = payload["number"]
                if not verify_commitment(key, number, published[slot]):
                    problems.append(f"{purpose}: number {number} does not match published HMAC {published[slot]}")
        except (KeyError, TypeError, ValueError):
            problems.append(f"{purpose}: malformed {ev.event_type} event")
    return problems
