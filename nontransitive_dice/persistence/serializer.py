"""
serializer.py
JSON encoding for transcript payloads and GameEvent streams.
Keys are bytes on the engine side and hex strings on the wire.
"""

import dataclasses
import json
from typing import Any, Iterable, List

from .events import GameEvent


def _default(o: Any):
    if isinstance(o, bytes):
        return o.hex()
    if dataclasses.is_dataclass(o):
        return dataclasses.asdict(o)
    return getattr(o, '__dict__', str(o))


def dumps(obj: Any) -> str:
    """
    Serialize a payload, dataclass or event list to a JSON string.
    """
    return json.dumps(obj, default=_default, sort_keys=True)


def loads(s: str):
    return json.loads(s)


def dumps_events(events: Iterable[GameEvent]) -> str:
    """Serialize a whole transcript as a JSON array."""
    return dumps([dataclasses.asdict(ev) for ev in events])


def loads_events(s: str) -> List[GameEvent]:
    """Inverse of dumps_events."""
    return [GameEvent(**item) for item in loads(s)]
