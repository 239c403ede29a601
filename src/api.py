"""
FastAPI backend for the life-log dashboard frontend.

Read-only endpoints that expose the insight report; rendering stays in
the frontend.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from analytics.averages import (
    average_duration,
    average_scores,
    average_time,
    average_time_outside,
    moving_average,
    moving_average_window,
)
from analytics.day_records import DayRecord, aggregate_events
from analytics.time_normalization import format_time_to_ampm
from constants import EventType, ScoreType
from db_utils import fetch_rows
from pipeline.insight_report import build_insight_report
from pipeline.record_loader import (
    load_events,
    load_journals,
    load_location_stats,
    load_sleep_records,
)
from settings import EngineConfig

log = logging.getLogger("api")


# ─── App setup ─────────────────────────────────────────────

app = FastAPI(title="Life-Log Insights API", version="1.0.0")

_origin_env = os.getenv("FRONTEND_ORIGINS", "")
_origins = [o.strip() for o in _origin_env.split(",") if o.strip()] or [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=False,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)


# ─── Helpers ───────────────────────────────────────────────


def _config(pivot_hour: Optional[float]) -> EngineConfig:
    try:
        config = EngineConfig.from_env()
    except ValueError as e:
        log.error("Invalid engine configuration: %s", e)
        raise HTTPException(status_code=500, detail=f"Invalid server configuration: {e}")
    if pivot_hour is not None:
        try:
            config = replace(config, pivot_hour=pivot_hour)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
    return config


def _load_window(days: int, config: EngineConfig):
    since = date.today() - timedelta(days=days)
    try:
        events = load_events(fetch_rows("daily_log", since=since))
        journals = load_journals(fetch_rows("journals", since=since))
        sleep_records = load_sleep_records(fetch_rows("sleep_export", since=since))
        location_stats = load_location_stats(fetch_rows("location_log", since=since))
    except Exception as e:
        log.error("Data fetch failed: %s", e)
        raise HTTPException(status_code=503, detail="Data store unavailable")
    records = aggregate_events(events, config.time_zone, config.pivot_hour, journals=journals)
    return records, journals, sleep_records, location_stats


def _timeline(records: List[DayRecord], days: int) -> List[Dict[str, Any]]:
    window = moving_average_window(days)
    rows = [r.to_dict() for r in records]
    for score_type in ScoreType:
        ma = moving_average([r.get(score_type) for r in records], window)
        for row, value in zip(rows, ma):
            row[f"{score_type.value}_ma"] = value
    return rows


# ─── Routes ────────────────────────────────────────────────


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/insights")
def insights(
    days: int = Query(14, ge=1, le=365),
    pivot_hour: Optional[float] = Query(None),
    wake: Optional[float] = Query(None),
    work: Optional[float] = Query(None),
    sleep: Optional[float] = Query(None),
    work_duration: Optional[float] = Query(None, gt=0, le=24),
    journal_gap: Optional[float] = Query(None, ge=0, le=24),
) -> Dict[str, Any]:
    config = _config(pivot_hour)
    records, journals, sleep_records, location_stats = _load_window(days, config)
    overrides = {
        key: value
        for key, value in (
            ("wake", wake), ("work", work), ("sleep", sleep),
            ("work_duration", work_duration), ("journal_gap", journal_gap),
        )
        if value is not None
    }
    return build_insight_report(
        records, config, thresholds=overrides or None,
        journals=journals, sleep_records=sleep_records, location_stats=location_stats,
    )


@app.get("/averages")
def averages(
    days: int = Query(14, ge=1, le=365),
    pivot_hour: Optional[float] = Query(None),
) -> Dict[str, Any]:
    config = _config(pivot_hour)
    records, _journals, sleep_records, location_stats = _load_window(days, config)
    times = {}
    for event_type in EventType:
        avg = average_time(records, event_type, config.pivot_hour)
        times[event_type.value] = format_time_to_ampm(avg)
    return {
        "days": len(records),
        "times": times,
        "scores": {k: round(v, 2) for k, v in average_scores(records).items()},
        "sleep_in_bed_hours": average_duration(sleep_records, "in_bed"),
        "time_outside_hours": average_time_outside(location_stats),
        "timeline": _timeline(records, days),
    }
