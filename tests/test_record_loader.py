"""
Tests for boundary coercion of fetched rows.

Mirrors the column-alias handling of the dashboard tables: rows with bad
timestamps or unknown event types are dropped, bad numbers become NaN.
"""

import math
import os
import sys
from datetime import date, datetime, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from constants import EventType
from pipeline.record_loader import (
    load_events,
    load_journals,
    load_location_stats,
    load_sleep_records,
)


# ─── daily_log ────────────────────────────────────────────────


class TestLoadEvents:

    def test_parses_rows(self):
        rows = [
            {"created_at": datetime(2024, 1, 1, 23, 0, tzinfo=timezone.utc), "event_type": "asleep"},
            {"timestamp": "2024-01-02T07:00:00Z", "eventType": "awake"},
        ]
        events = load_events(rows)
        assert [e.event_type for e in events] == [EventType.ASLEEP, EventType.AWAKE]
        assert events[1].timestamp.hour == 7

    def test_drops_bad_rows(self, caplog):
        rows = [
            {"created_at": "not a date", "event_type": "asleep"},
            {"created_at": "2024-01-01T07:00:00Z", "event_type": "lunch"},
            {"created_at": None, "event_type": "awake"},
            {"created_at": "2024-01-01T08:00:00Z", "event_type": "work_start"},
        ]
        with caplog.at_level("WARNING"):
            events = load_events(rows)
        assert len(events) == 1
        assert events[0].event_type is EventType.WORK_START
        assert "2 bad timestamps, 1 unknown event types" in caplog.text


# ─── journals ─────────────────────────────────────────────────


class TestLoadJournals:

    def test_scores_and_tags(self):
        rows = [{
            "created_at": "2024-01-01T12:00:00Z",
            "mood_score": "7",
            "energy_score": 6,
            "positive_feelings": ["Happy 😊", ""],
            "negative_feelings": None,
        }]
        entry = load_journals(rows)[0]
        assert entry.mood_score == 7.0
        assert entry.energy_score == 6.0
        assert entry.positive_feelings == ("Happy 😊",)
        assert entry.negative_feelings == ()

    def test_date_only_row(self):
        entry = load_journals([{"date": "2024-01-03", "moodScore": 5}])[0]
        assert entry.timestamp is None
        assert entry.date == date(2024, 1, 3)
        assert entry.energy_score is None

    def test_drops_rows_without_scores_or_date(self):
        rows = [
            {"created_at": "2024-01-01T12:00:00Z"},
            {"mood_score": 5},
            {"created_at": "2024-01-01T12:00:00Z", "mood_score": "n/a"},
        ]
        assert load_journals(rows) == []


# ─── sleep_export ─────────────────────────────────────────────


class TestLoadSleepRecords:

    def test_aliases_and_coercion(self):
        rows = [
            {"Date/Time": "2024-01-01", "In Bed (hr)": "7.5", "Deep": "abc", "REM": 1.5,
             "Start": "2024-01-01T23:10:00Z", "source": "Watch"},
            {"date": date(2024, 1, 2), "inBed": 8, "core": None},
        ]
        records = load_sleep_records(rows)
        assert len(records) == 2
        first, second = records
        assert first.date == date(2024, 1, 1)
        assert first.in_bed == 7.5
        assert math.isnan(first.deep)
        assert first.rem == 1.5
        assert first.sleep_start.hour == 23
        assert first.source == "Watch"
        assert second.in_bed == 8.0
        assert math.isnan(second.core)
        assert second.source is None

    def test_drops_rows_without_date(self):
        records = load_sleep_records([{"inBed": 7}, {"date": "2024-01-05", "inBed": 6}])
        assert [r.date for r in records] == [date(2024, 1, 5)]

    def test_empty(self):
        assert load_sleep_records([]) == []


# ─── location ─────────────────────────────────────────────────


class TestLoadLocationStats:

    def test_parses(self):
        stats = load_location_stats([
            {"date": "2024-01-01", "timeOutside": "2.5", "work_duration": 8},
            {"date": None, "time_outside": 1},
        ])
        assert len(stats) == 1
        assert stats[0].time_outside == 2.5
        assert stats[0].work_duration == 8.0

    def test_location_log_rows_keyed_by_created_at(self):
        stats = load_location_stats([
            {"created_at": "2024-01-02T20:00:00Z", "time_outside": 3},
            {"created_at": "garbage", "time_outside": 1},
        ])
        assert [s.date for s in stats] == [date(2024, 1, 2)]
        assert stats[0].time_outside == 3.0
