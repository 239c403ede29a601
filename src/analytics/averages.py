"""Averaging helpers for headline figures and default thresholds."""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence

import pandas as pd

from analytics.day_records import DayRecord
from analytics.time_normalization import cohort_hour
from constants import DEFAULT_PIVOT_HOUR, EventType, ScoreType

# (max days in range, window size)
MOVING_AVERAGE_WINDOWS = ((7, 3), (14, 5), (30, 7), (60, 14))
MAX_MOVING_AVERAGE_WINDOW = 21


def average_time(days: Sequence[DayRecord], event_type,
                 pivot_hour: float = DEFAULT_PIVOT_HOUR) -> Optional[float]:
    """Mean time of day for *event_type* on the cohort scale.

    Bedtimes after midnight count as 24+ so they average with evening
    bedtimes; None when no day has the event.
    """
    event_type = EventType.parse(event_type)
    hours = [cohort_hour(d.get(event_type), event_type, pivot_hour)
             for d in days if d.get(event_type) is not None]
    if not hours:
        return None
    return sum(hours) / len(hours)


def average_threshold(days: Sequence[DayRecord], event_type,
                      pivot_hour: float = DEFAULT_PIVOT_HOUR) -> Optional[float]:
    """average_time expressed as a threshold slider value."""
    avg = average_time(days, event_type, pivot_hour)
    return None if avg is None else avg + pivot_hour


def average_duration(sleep_records: Sequence, field: str = "in_bed") -> Optional[float]:
    """Mean of a numeric duration field, skipping missing / NaN entries."""
    values: List[float] = []
    for record in sleep_records:
        value = getattr(record, field, None)
        if value is None or math.isnan(value):
            continue
        values.append(value)
    if not values:
        return None
    return sum(values) / len(values)


def average_time_outside(location_stats: Sequence) -> float:
    values = [s.time_outside for s in location_stats
              if s.time_outside is not None and not math.isnan(s.time_outside)]
    if not values:
        return 0.0
    return sum(values) / len(values)


def average_scores(days: Sequence[DayRecord]) -> Dict[str, float]:
    """Per-score mean across days that have it; 0.0 when none do."""
    out: Dict[str, float] = {}
    for score_type in ScoreType:
        vals = [d.get(score_type) for d in days if d.get(score_type) is not None]
        out[score_type.value] = sum(vals) / len(vals) if vals else 0.0
    return out


# ─── Moving averages ──────────────────────────────────────────


def moving_average_window(days_in_range: int) -> int:
    for max_days, window in MOVING_AVERAGE_WINDOWS:
        if days_in_range <= max_days:
            return window
    return MAX_MOVING_AVERAGE_WINDOW


def moving_average(values: Sequence[Optional[float]], window: int) -> List[Optional[float]]:
    """Centered rolling mean that skips missing values.

    Positions whose window holds no data are None.
    """
    if window < 1:
        raise ValueError("window must be >= 1")
    series = pd.to_numeric(pd.Series(list(values), dtype="object"), errors="coerce").astype("float64")
    rolled = series.rolling(window, center=True, min_periods=1).mean()
    return [None if pd.isna(v) else float(v) for v in rolled]
