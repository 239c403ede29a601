"""Day-level records built from daily_log events and journal entries.

A DayRecord maps a calendar date (in the reference time zone) to day-cycle
hours for each logged event type plus the mood / energy scores journaled
that day.  Records are built once per query window and never mutated.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date as date_type
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from analytics.time_normalization import fold_hour, to_local
from constants import DEFAULT_PIVOT_HOUR, DEFAULT_TIME_ZONE, EventType, ScoreType

log = logging.getLogger("day_records")

DayField = Union[EventType, ScoreType]


def parse_field(key: Any) -> DayField:
    """Resolve a field name to its EventType / ScoreType member."""
    if isinstance(key, (EventType, ScoreType)):
        return key
    for enum_cls in (EventType, ScoreType):
        try:
            return enum_cls(key)
        except ValueError:
            continue
    raise ValueError(f"Unknown day-record field: {key!r}")


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return math.isnan(float(value))
    except (TypeError, ValueError):
        return True


# ─── Input records ────────────────────────────────────────────


@dataclass(frozen=True)
class RawEvent:
    timestamp: Any
    event_type: EventType

    def __post_init__(self):
        object.__setattr__(self, "event_type", EventType.parse(self.event_type))


@dataclass(frozen=True)
class JournalEntry:
    mood_score: Optional[float]
    energy_score: Optional[float]
    timestamp: Any = None
    date: Optional[date_type] = None
    positive_feelings: Tuple[str, ...] = ()
    negative_feelings: Tuple[str, ...] = ()
    cognitive_states: Tuple[str, ...] = ()
    physical_states: Tuple[str, ...] = ()

    def local_date(self, time_zone: str) -> Optional[date_type]:
        if self.timestamp is not None:
            return to_local(self.timestamp, time_zone).date()
        return self.date

    def sort_key(self) -> int:
        if self.timestamp is None:
            return 0
        return to_local(self.timestamp, "UTC").value


@dataclass(frozen=True)
class SleepRecord:
    """One sleep_export row; durations in hours, NaN when unparsable."""

    date: date_type
    sleep_start: Any = None
    sleep_end: Any = None
    core: float = math.nan
    rem: float = math.nan
    deep: float = math.nan
    in_bed: float = math.nan
    asleep: float = math.nan
    awake: float = math.nan
    source: Optional[str] = None


@dataclass(frozen=True)
class LocationStats:
    date: date_type
    time_outside: Optional[float] = None
    work_duration: Optional[float] = None


# ─── DayRecord ────────────────────────────────────────────────


@dataclass(frozen=True)
class DayRecord:
    """One calendar day: event hours and journal scores, missing keys absent."""

    date: date_type
    values: Mapping[DayField, float] = field(default_factory=dict)

    def __post_init__(self):
        clean: Dict[DayField, float] = {}
        for key, value in dict(self.values).items():
            parsed = parse_field(key)
            if _is_missing(value):
                continue
            clean[parsed] = float(value)
        object.__setattr__(self, "values", MappingProxyType(clean))

    def get(self, key: Any) -> Optional[float]:
        return self.values.get(parse_field(key))

    def has(self, *keys: Any) -> bool:
        return all(self.get(k) is not None for k in keys)

    def with_scores(self, mood_score: Optional[float], energy_score: Optional[float]) -> "DayRecord":
        merged = dict(self.values)
        if not _is_missing(mood_score):
            merged[ScoreType.MOOD] = mood_score
        if not _is_missing(energy_score):
            merged[ScoreType.ENERGY] = energy_score
        return DayRecord(self.date, merged)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"date": self.date.isoformat()}
        out.update({k.value: v for k, v in self.values.items()})
        return out


# ─── Aggregation ──────────────────────────────────────────────


def aggregate_events(
    events: Sequence[RawEvent],
    time_zone: str = DEFAULT_TIME_ZONE,
    pivot_hour: float = DEFAULT_PIVOT_HOUR,
    journals: Optional[Iterable[JournalEntry]] = None,
) -> List[DayRecord]:
    """Fold raw events into one DayRecord per calendar day, ascending by date.

    Events are applied in timestamp order, so the latest event of a type on
    a given day wins.  A bedtime logged before the pivot hour belongs to the
    previous day's record.
    """
    localized = sorted(
        ((to_local(e.timestamp, time_zone), e) for e in events),
        key=lambda pair: pair[0],
    )

    days: Dict[date_type, Dict[DayField, float]] = defaultdict(dict)
    for local, event in localized:
        hour = local.hour + local.minute / 60
        if event.event_type is EventType.ASLEEP and hour < pivot_hour:
            day = (local - pd.Timedelta(hours=24)).date()
        else:
            day = local.date()
        days[day][event.event_type] = fold_hour(hour, pivot_hour)

    records = [DayRecord(d, days[d]) for d in sorted(days)]
    log.debug("Aggregated %d events into %d day records", len(localized), len(records))

    if journals is not None:
        records = merge_journal_scores(records, journals, time_zone)
    return records


def merge_journal_scores(
    records: Sequence[DayRecord],
    journals: Iterable[JournalEntry],
    time_zone: str = DEFAULT_TIME_ZONE,
) -> List[DayRecord]:
    """Attach the latest journal entry's scores to each matching day."""
    by_date: Dict[date_type, List[Tuple[int, int, JournalEntry]]] = defaultdict(list)
    for idx, entry in enumerate(journals):
        day = entry.local_date(time_zone)
        if day is None:
            continue
        by_date[day].append((entry.sort_key(), idx, entry))

    merged: List[DayRecord] = []
    for record in records:
        matches = by_date.get(record.date)
        if not matches:
            merged.append(record)
            continue
        latest = max(matches, key=lambda m: (m[0], m[1]))[2]
        merged.append(record.with_scores(latest.mood_score, latest.energy_score))
    return merged
