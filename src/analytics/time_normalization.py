"""Sleep-aware day-cycle clock.

Timestamps are converted to local wall-clock time and folded onto a
continuous scale that starts at the pivot hour, so an 11PM bedtime (23.0)
and a 1AM bedtime (25.0) sit next to each other instead of 22 hours apart.

Known limitation: the scale assumes at most one instance of each event type
per calendar day and cannot represent an interval crossing two pivots.
"""

from __future__ import annotations

import math
from typing import Any, Optional

import pandas as pd

from constants import DEFAULT_PIVOT_HOUR, HOURS_IN_DAY, EventType

TimestampLike = Any


def to_local(timestamp: TimestampLike, time_zone: str) -> pd.Timestamp:
    """Convert *timestamp* to wall-clock time in *time_zone*.

    Naive timestamps are interpreted as UTC.
    """
    ts = pd.Timestamp(timestamp)
    if ts is pd.NaT:
        raise ValueError(f"Unparsable timestamp: {timestamp!r}")
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return ts.tz_convert(time_zone)


def clock_hour(timestamp: TimestampLike, time_zone: str) -> float:
    local = to_local(timestamp, time_zone)
    return local.hour + local.minute / 60


def fold_hour(hour: float, pivot_hour: float = DEFAULT_PIVOT_HOUR) -> float:
    """Move hours before the pivot onto the end of the previous evening."""
    return hour + HOURS_IN_DAY if hour < pivot_hour else hour


def normalize_hour(timestamp: TimestampLike, time_zone: str,
                   pivot_hour: float = DEFAULT_PIVOT_HOUR) -> float:
    return fold_hour(clock_hour(timestamp, time_zone), pivot_hour)


def cohort_hour(value: float, event_type: EventType,
                pivot_hour: float = DEFAULT_PIVOT_HOUR) -> float:
    """Hour used when splitting days into early/late cohorts.

    Bedtimes keep the pivot fold so that cross-midnight sleep stays later
    than an evening bedtime; every other event is compared on the plain
    24-hour clock.
    """
    hour = value % HOURS_IN_DAY
    if EventType.parse(event_type) is EventType.ASLEEP:
        return fold_hour(hour, pivot_hour)
    return hour


def format_time_to_ampm(hour_value: Optional[float]) -> str:
    """Render a day-cycle hour as ``h:MM AM``; ``None`` renders as ``-``."""
    if hour_value is None or (isinstance(hour_value, float) and math.isnan(hour_value)):
        return "-"
    total_minutes = int(round((hour_value % HOURS_IN_DAY) * 60)) % (HOURS_IN_DAY * 60)
    hours, minutes = divmod(total_minutes, 60)
    suffix = "AM" if hours < 12 else "PM"
    display = hours % 12 or 12
    return f"{display}:{minutes:02d} {suffix}"
