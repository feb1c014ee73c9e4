"""
csv_io.py
Persistence utilities for appending round transcripts to CSV files.
"""

import os
import csv
from typing import Dict, List, Any

from .events import GameEvent
from . import serializer

TRANSCRIPT_HEADER = [
    "game_id", "event_type", "player_type", "payload", "timestamp",
]
SUMMARY_HEADER = [
    "dice_a", "dice_b", "trials", "wins_a", "wins_b", "ties", "expected_a", "observed_a",
]

def append_rows_to_csv(rows: List[Dict[str, Any]], csv_path: str, header: List[str]):
    write_header = not os.path.exists(csv_path)
    with open(csv_path, "a", newline='', encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=header)
        if write_header:
            writer.writeheader()
        for row in rows:
            writer.writerow(row)

def transcript_rows(events: List[GameEvent], timestamp: str) -> List[Dict[str, Any]]:
    return [{
        "game_id": ev.game_id,
        "event_type": ev.event_type,
        "player_type": ev.player_type,
        "payload": serializer.dumps(ev.payload),
        "timestamp": timestamp,
    } for ev in events]

def read_transcript(csv_path: str) -> List[GameEvent]:
    """Load transcript rows written by append_rows_to_csv back into GameEvent objects."""
    with open(csv_path, newline='', encoding="utf-8") as f:
        return [
            GameEvent(game_id=row["game_id"], event_type=row["event_type"],
                      payload=serializer.loads(row["payload"]), player_type=row["player_type"] or None)
            for row in csv.DictReader(f)
        ]

def get_transcript_header():
    return TRANSCRIPT_HEADER.copy()

def get_summary_header():
    return SUMMARY_HEADER.copy()
