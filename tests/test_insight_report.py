"""Tests for the insight report builder and the plain-text digest."""

import os
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from analytics.day_records import JournalEntry, LocationStats, SleepRecord
from pipeline.insight_report import (
    STANDARD_CARDS,
    build_insight_report,
    render_digest,
    resolve_thresholds,
)
from settings import EngineConfig


def _week(day_builder):
    rows = []
    for i in range(7):
        rows.append({
            "awake": 30 + (i % 3),                 # 6-8AM
            "work_start": 33,
            "work_end": 41 + (i % 2) * 2,          # 8h or 10h
            "journal_start": 31 + (i % 2) * 1.5,
            "asleep": 23 if i % 2 == 0 else 25,
            "mood_score": 7 if i % 2 == 0 else 5,
            "energy_score": 6 + (i % 2),
        })
    return day_builder(rows)


# ─── Thresholds ───────────────────────────────────────────────


class TestResolveThresholds:

    def test_defaults_follow_pivot(self):
        out = resolve_thresholds(EngineConfig(pivot_hour=18))
        assert out["wake"] == 24
        assert out["work"] == 26
        assert out["sleep"] == 40
        assert out["work_duration"] == 8.0
        assert out["journal_gap"] == 1.0

    def test_pivot_four(self):
        out = resolve_thresholds(EngineConfig(pivot_hour=4))
        assert out["wake"] == 10
        assert out["sleep"] == 26

    def test_override(self):
        out = resolve_thresholds(EngineConfig(), {"sleep": 42})
        assert out["sleep"] == 42.0

    def test_unknown_override_raises(self):
        with pytest.raises(ValueError):
            resolve_thresholds(EngineConfig(), {"lunch": 12})


# ─── build_insight_report ─────────────────────────────────────


class TestBuildInsightReport:

    def test_all_cards_present(self, day_builder):
        report = build_insight_report(_week(day_builder), EngineConfig(), thresholds={"sleep": 42})
        assert set(report["cards"]) == {card.key for card in STANDARD_CARDS}
        assert report["analysis_status"] == "success"
        assert report["degraded_reasons"] == []
        assert report["window"]["days"] == 7
        assert report["window"]["first_date"] == "2024-01-01"
        assert report["window"]["last_date"] == "2024-01-07"

    def test_card_payload(self, day_builder):
        report = build_insight_report(_week(day_builder), EngineConfig(), thresholds={"sleep": 42})
        card = report["cards"]["sleep_energy"]
        assert card["title"] == "Sleep Time & Energy"
        assert card["threshold"] == 42.0
        assert card["sampleSize"] == 7
        assert card["correlationStrength"] == "very strong"
        prev = report["cards"]["previous_sleep_energy"]
        assert prev["sampleSize"] == 6

    def test_averages(self, day_builder):
        sleep = [SleepRecord(date(2024, 1, 1), in_bed=7.0), SleepRecord(date(2024, 1, 2), in_bed=9.0)]
        outside = [LocationStats(date(2024, 1, 1), time_outside=1.5)]
        report = build_insight_report(_week(day_builder), EngineConfig(),
                                      sleep_records=sleep, location_stats=outside)
        averages = report["averages"]
        assert averages["times"]["work_start"]["display"] == "9:00 AM"
        assert averages["times"]["asleep"]["hour"] == pytest.approx((4 * 23 + 3 * 25) / 7)
        assert averages["scores"]["mood_score"] == pytest.approx((4 * 7 + 3 * 5) / 7)
        assert averages["sleep_in_bed_hours"] == pytest.approx(8.0)
        assert averages["time_outside_hours"] == pytest.approx(1.5)

    def test_no_days_is_degraded(self):
        report = build_insight_report([], EngineConfig())
        assert report["analysis_status"] == "degraded"
        assert report["degraded_reasons"] == ["no_day_records"]
        assert report["averages"]["times"]["awake"]["display"] == "-"
        assert all(c["sampleSize"] == 0 for c in report["cards"].values())

    def test_too_few_days_is_degraded(self, day_builder):
        report = build_insight_report(day_builder([{"awake": 30, "mood_score": 6}]), EngineConfig())
        assert report["degraded_reasons"] == ["insufficient_data"]

    def test_feelings_only_with_journals(self, day_builder):
        days = _week(day_builder)
        assert "feelings" not in build_insight_report(days, EngineConfig())
        journals = [JournalEntry(7, 6, positive_feelings=("Calm",))]
        report = build_insight_report(days, EngineConfig(), journals=journals)
        assert report["feelings"]["positive"] == [{"name": "Calm", "count": 1, "emoji": None}]


# ─── render_digest ────────────────────────────────────────────


class TestRenderDigest:

    def test_sections(self, day_builder):
        report = build_insight_report(
            _week(day_builder), EngineConfig(), thresholds={"sleep": 42},
            journals=[JournalEntry(7, 6, positive_feelings=("Calm",))],
        )
        text = render_digest(report)
        assert text.startswith("=== LIFE-LOG INSIGHTS (2024-01-01 -> 2024-01-07) ===")
        assert "NOTE: Only 7 days logged" in text
        assert "[AVERAGES]" in text
        assert "[INSIGHTS]" in text
        assert "Sleep Time & Energy (n=7" in text
        assert "[FEELINGS]" in text
        assert "positive: Calm x1" in text
        assert "[ANALYSIS STATUS]" not in text

    def test_heuristic_p_marked(self, day_builder):
        days = day_builder([
            {"asleep": 23, "energy_score": 7},
            {"asleep": 25, "energy_score": 5},
            {"asleep": 23, "energy_score": 7},
        ])
        text = render_digest(build_insight_report(days, EngineConfig(), thresholds={"sleep": 42}))
        assert "p~=" in text

    def test_degraded_status_rendered(self):
        text = render_digest(build_insight_report([], EngineConfig()))
        assert "[ANALYSIS STATUS]" in text
        assert "reasons=no_day_records" in text
