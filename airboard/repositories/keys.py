from __future__ import annotations

import json
from datetime import datetime, timezone

from airboard.models.sample import KeyRange

KEY_FORMAT = "%Y-%m-%dT%H:%M:%S"


def to_key(dt: datetime) -> str:
    """Store keys are UTC wall-clock strings; lexicographic order is time order."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime(KEY_FORMAT)


def from_key(key: str) -> datetime:
    return datetime.strptime(key, KEY_FORMAT).replace(tzinfo=timezone.utc)


def history_key(day: str, clock: str = "00:00") -> str:
    if len(clock) == 5:
        clock = f"{clock}:00"
    return f"{day}T{clock}"


def day_range(day: str, start: str, end: str) -> KeyRange:
    return KeyRange(start=history_key(day, start), end=history_key(day, end))


def days_range(day_from: str, day_to: str) -> KeyRange:
    return KeyRange(start=history_key(day_from, "00:00:00"), end=history_key(day_to, "23:59:59"))


def rtdb_str(value: str) -> str:
    # Query parameters of the REST store are JSON literals.
    return json.dumps(value)
