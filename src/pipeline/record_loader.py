"""
Boundary coercion from fetched table rows to engine records.

Rows come from daily_log, journals, sleep_export and the dashboard view,
so every field is looked up through a list of column aliases.  Unparsable
timestamps drop the row; unparsable numbers become NaN.  Neither is fatal
to the batch; dropped rows are counted and logged.
"""

from __future__ import annotations

import logging
import math
from datetime import date as date_type
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from analytics.day_records import JournalEntry, LocationStats, RawEvent, SleepRecord
from constants import EventType

log = logging.getLogger("record_loader")

TIMESTAMP_KEYS = ("created_at", "timestamp", "createdAt", "time")
EVENT_TYPE_KEYS = ("event_type", "eventType", "type")
MOOD_KEYS = ("mood_score", "moodScore", "journals_mood_score")
ENERGY_KEYS = ("energy_score", "energyScore", "journals_energy_score")

SLEEP_ALIASES: Dict[str, Sequence[str]] = {
    "date":        ("date", "Date/Time", "created_at"),
    "sleep_start": ("sleepStart", "sleep_sleepstart", "Start", "sleep_start"),
    "sleep_end":   ("sleepEnd", "sleep_sleepend", "End", "sleep_end"),
    "core":        ("core", "Core", "sleep_core"),
    "rem":         ("rem", "REM", "sleep_rem"),
    "deep":        ("deep", "Deep", "sleep_deep"),
    "in_bed":      ("inBed", "In Bed (hr)", "sleep_inbed", "in_bed"),
    "asleep":      ("asleep", "sleep_asleep"),
    "awake":       ("awake", "sleep_awake"),
    "source":      ("source", "sleep_source"),
}
SLEEP_NUMERIC = ("core", "rem", "deep", "in_bed", "asleep", "awake")


def _pick(row: Dict[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row.get(key)
    return None


def _timestamp(value: Any) -> Optional[pd.Timestamp]:
    if value is None:
        return None
    ts = pd.to_datetime(value, errors="coerce", utc=True)
    return None if pd.isna(ts) else ts


def _date(value: Any) -> Optional[date_type]:
    if value is None:
        return None
    if isinstance(value, date_type) and not hasattr(value, "hour"):
        return value
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    return None if pd.isna(ts) else ts.date()


def _num(value: Any) -> float:
    if value is None:
        return math.nan
    out = pd.to_numeric(value, errors="coerce")
    try:
        return float(out)
    except (TypeError, ValueError):
        return math.nan


def _optional_num(value: Any) -> Optional[float]:
    out = _num(value)
    return None if math.isnan(out) else out


def _tags(value: Any) -> tuple:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value if v)


# ─── Loaders ──────────────────────────────────────────────────


def load_events(rows: Iterable[Dict[str, Any]]) -> List[RawEvent]:
    events: List[RawEvent] = []
    bad_ts = unknown = 0
    for row in rows:
        ts = _timestamp(_pick(row, TIMESTAMP_KEYS))
        if ts is None:
            bad_ts += 1
            continue
        try:
            event_type = EventType.parse(_pick(row, EVENT_TYPE_KEYS))
        except ValueError:
            unknown += 1
            continue
        events.append(RawEvent(ts, event_type))
    if bad_ts or unknown:
        log.warning("Dropped daily_log rows: %d bad timestamps, %d unknown event types",
                    bad_ts, unknown)
    return events


def load_journals(rows: Iterable[Dict[str, Any]]) -> List[JournalEntry]:
    entries: List[JournalEntry] = []
    dropped = 0
    for row in rows:
        ts = _timestamp(_pick(row, TIMESTAMP_KEYS))
        day = _date(row.get("date")) if ts is None else None
        mood = _optional_num(_pick(row, MOOD_KEYS))
        energy = _optional_num(_pick(row, ENERGY_KEYS))
        if (ts is None and day is None) or (mood is None and energy is None):
            dropped += 1
            continue
        entries.append(JournalEntry(
            mood_score=mood,
            energy_score=energy,
            timestamp=ts,
            date=day,
            positive_feelings=_tags(row.get("positive_feelings")),
            negative_feelings=_tags(row.get("negative_feelings")),
            cognitive_states=_tags(row.get("cognitive_states")),
            physical_states=_tags(row.get("physical_states")),
        ))
    if dropped:
        log.warning("Dropped %d journal rows without a date or scores", dropped)
    return entries


def load_sleep_records(rows: Iterable[Dict[str, Any]]) -> List[SleepRecord]:
    """Coerce sleep_export rows; numeric strings that fail to parse become NaN."""
    picked = [{field: _pick(row, keys) for field, keys in SLEEP_ALIASES.items()} for row in rows]
    if not picked:
        return []

    df = pd.DataFrame(picked, columns=list(SLEEP_ALIASES))
    for col in SLEEP_NUMERIC:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("float64")
    df["date"] = df["date"].map(_date)

    n_bad = int(df["date"].isna().sum())
    if n_bad:
        log.warning("Dropped %d sleep rows without a parsable date", n_bad)
    df = df[df["date"].notna()]

    records: List[SleepRecord] = []
    for row in df.to_dict("records"):
        records.append(SleepRecord(
            date=row["date"],
            sleep_start=_timestamp(row["sleep_start"]),
            sleep_end=_timestamp(row["sleep_end"]),
            source=row["source"] if isinstance(row["source"], str) else None,
            **{col: float(row[col]) for col in SLEEP_NUMERIC},
        ))
    return records


def load_location_stats(rows: Iterable[Dict[str, Any]]) -> List[LocationStats]:
    stats: List[LocationStats] = []
    dropped = 0
    for row in rows:
        day = _date(_pick(row, ("date", "created_at")))
        if day is None:
            dropped += 1
            continue
        stats.append(LocationStats(
            date=day,
            time_outside=_optional_num(_pick(row, ("time_outside", "timeOutside"))),
            work_duration=_optional_num(_pick(row, ("work_duration", "workDuration"))),
        ))
    if dropped:
        log.warning("Dropped %d location rows without a parsable date", dropped)
    return stats
