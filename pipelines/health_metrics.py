"""
pipelines/health_metrics.py

Small health calculations used by the overview and tracker pages:
BMI, BMI category, reading status/colour, reading formatting and
grouping of tracker history by day.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from stores.models import CombinedTracking, TrackingFactor, TrackingValue, UserConditionTrack

logger = logging.getLogger(__name__)

INVALID_BMI = "Invalid BMI"

STATUS_COLORS = {
    "normal": "#4CAF50",
    "warning": "#FFC107",
    "critical": "#F44336",
}
DEFAULT_STATUS_COLOR = "#666"

_RANGE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(?:-|–|to)\s*(-?\d+(?:\.\d+)?)")


def _to_number(x: Any) -> Optional[float]:
    if isinstance(x, bool):
        return None
    try:
        value = float(x)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def calculate_bmi(weight: Any, height_cm: Any) -> float:
    """
    Body Mass Index from weight (kg) and height (cm).

    Returns 0 for missing, non-numeric, zero or negative input.
    """
    w = _to_number(weight)
    h = _to_number(height_cm)
    if w is None or h is None:
        logger.debug("Invalid input for BMI calculation: weight=%r height=%r", weight, height_cm)
        return 0
    if w <= 0 or h <= 0:
        logger.debug("Weight and height must be positive: weight=%r height=%r", weight, height_cm)
        return 0

    height_m = h / 100
    return w / (height_m * height_m)


def bmi_category(bmi: Any) -> str:
    value = _to_number(bmi)
    if value is None or value <= 0:
        return INVALID_BMI
    if value < 18.5:
        return "Underweight"
    if value < 25:
        return "Normal weight"
    if value < 30:
        return "Overweight"
    return "Obese"


def status_color(status: str) -> str:
    return STATUS_COLORS.get((status or "").lower(), DEFAULT_STATUS_COLOR)


def parse_normal_range(normal_range: str) -> Optional[tuple[float, float]]:
    """``"90-120"`` / ``"90 to 120 mmHg"`` -> (90.0, 120.0); anything else -> None."""
    m = _RANGE.match(normal_range or "")
    if not m:
        return None
    low, high = float(m.group(1)), float(m.group(2))
    if low > high:
        low, high = high, low
    return low, high


def reading_status(values: Sequence[TrackingValue], factors: Iterable[TrackingFactor]) -> str:
    """
    ``warning`` if any value falls outside its factor's normal range,
    ``normal`` if every checkable value is inside, ``unknown`` otherwise.
    """
    ranges = {}
    for f in factors:
        r = parse_normal_range(f.normal_range)
        if r is not None:
            ranges[f.id] = r

    checked = 0
    for v in values:
        r = ranges.get(v.tracking_factor_id)
        if r is None:
            continue
        checked += 1
        if not r[0] <= v.value <= r[1]:
            return "warning"
    return "normal" if checked else "unknown"


def _fmt_value(value: float) -> str:
    return f"{value:g}"


def format_reading(values: Sequence[TrackingValue]) -> str:
    if not values:
        return "No readings"

    systolic = next((v for v in values if "systolic" in v.name.lower()), None)
    diastolic = next((v for v in values if "diastolic" in v.name.lower()), None)
    if systolic and diastolic:
        return f"{_fmt_value(systolic.value)}/{_fmt_value(diastolic.value)} {systolic.unit}".strip()

    first = values[0]
    return f"{_fmt_value(first.value)} {first.unit}".strip()


def latest_entry(track: Optional[UserConditionTrack]) -> Optional[CombinedTracking]:
    if track is None or not track.condition_values:
        return None
    return track.condition_values[0]


def group_entries_by_date(
    entries: Iterable[CombinedTracking],
) -> dict[Optional[date], list[CombinedTracking]]:
    """
    Group combined entries by the calendar day of their first value.

    Insertion order follows the input order; entries without a timestamp
    are grouped under None.
    """
    groups: dict[Optional[date], list[CombinedTracking]] = {}
    for entry in entries:
        recorded = entry.recorded_at
        key = recorded.date() if recorded is not None else None
        groups.setdefault(key, []).append(entry)
    return groups
