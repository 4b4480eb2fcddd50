from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from airboard.models.sample import Sample


def normalize(records: Mapping[str, Any] | None) -> list[Sample]:
    """Turn a raw `{key: {variable: value}}` record set into time-ordered samples.

    Ordering is by parsed timestamp; equal timestamps keep the order in which
    the store delivered them. Keys that are not timestamps go last.
    """
    if not records:
        return []

    samples: list[Sample] = []
    for key, body in records.items():
        if not key:
            continue
        samples.append(Sample(timestamp=str(key), values=_numeric_fields(body)))

    samples.sort(key=_sort_key)
    return samples


def parse_key(key: str) -> datetime | None:
    try:
        dt = datetime.fromisoformat(key.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _sort_key(sample: Sample) -> tuple[int, datetime]:
    parsed = parse_key(sample.timestamp)
    if parsed is None:
        return (1, datetime.min)
    return (0, parsed)


def _numeric_fields(body: Any) -> dict[str, float]:
    if not isinstance(body, Mapping):
        return {}
    values: dict[str, float] = {}
    for name, raw in body.items():
        value = _float_or_none(raw)
        if value is not None:
            values[str(name)] = value
    return values


def _float_or_none(v: Any) -> float | None:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    value = float(v)
    if not math.isfinite(value):
        return None
    return value
