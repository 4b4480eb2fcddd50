from __future__ import annotations

import math
from dataclasses import dataclass

from airboard.models.channel import Tier


@dataclass(frozen=True)
class Threshold:
    floor: float
    normal_ceiling: float
    warn_ceiling: float


THRESHOLDS: dict[str, Threshold] = {
    "temp": Threshold(floor=18, normal_ceiling=28, warn_ceiling=32),
    "hum": Threshold(floor=40, normal_ceiling=60, warn_ceiling=75),
    "co2": Threshold(floor=400, normal_ceiling=1000, warn_ceiling=1500),
    "pm25": Threshold(floor=0, normal_ceiling=35, warn_ceiling=55),
    "pm1": Threshold(floor=0, normal_ceiling=20, warn_ceiling=35),
    "pm10": Threshold(floor=0, normal_ceiling=50, warn_ceiling=75),
}

FALLBACK_VARIABLE = "pm25"

# pm1 and pm10 have no indicator of their own on the dashboard.
_STATUS_SLOTS = {"pm1": "pm25", "pm10": "pm25"}


def threshold_for(variable: str) -> Threshold:
    return THRESHOLDS.get(variable) or THRESHOLDS[FALLBACK_VARIABLE]


def evaluate(variable: str, value: float | None) -> Tier | None:
    """Three-tier status for one reading, or None when there is nothing to grade."""
    if not _is_number(value):
        return None
    limits = threshold_for(variable)
    if value <= limits.normal_ceiling:
        return Tier.NORMAL
    if value <= limits.warn_ceiling:
        return Tier.WARNING
    return Tier.CRITICAL


def is_out_of_range(variable: str, value: float | None) -> bool:
    if not _is_number(value):
        return False
    limits = threshold_for(variable)
    return value > limits.warn_ceiling or value < limits.floor


def status_slot(variable: str) -> str:
    return _STATUS_SLOTS.get(variable, variable)


def legend(variable: str) -> dict[Tier, str]:
    limits = threshold_for(variable)
    return {
        Tier.NORMAL: f"≤ {_fmt(limits.normal_ceiling)}",
        Tier.WARNING: f"{_fmt(limits.normal_ceiling + 1)} – {_fmt(limits.warn_ceiling)}",
        Tier.CRITICAL: f"> {_fmt(limits.warn_ceiling)}",
    }


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
