"""Insights pipeline orchestration with explicit health signaling."""

from __future__ import annotations

import json
import logging
import os
import traceback
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from analytics.day_records import aggregate_events
from db_utils import fetch_rows, get_conn_str
from pipeline.insight_report import build_insight_report, render_digest
from pipeline.record_loader import (
    load_events,
    load_journals,
    load_location_stats,
    load_sleep_records,
)
from settings import EngineConfig

log = logging.getLogger("insights_pipeline")


class InsightsPipeline:
    """Fetch one window of life-log rows and build the insight report."""

    def __init__(self, config: Optional[EngineConfig] = None, days: int = 14,
                 conn_str: Optional[str] = None):
        self.config = config or EngineConfig.from_env()
        self.days = days
        self.conn_str = conn_str or get_conn_str()

    def run(self, thresholds: Optional[Dict[str, float]] = None) -> Dict[str, Any]:
        """Execute the pipeline; never raises, failures land in the status."""
        status: Dict[str, Any] = {
            "run_date": date.today().isoformat(),
            "run_started_at": datetime.utcnow().isoformat() + "Z",
            "fetch_ok": False,
            "analysis_status": "unknown",
            "degraded_reasons": [],
            "report": None,
            "digest": "",
        }

        log.info("=" * 60)
        log.info("  LIFE-LOG INSIGHTS STARTED (last %d days)", self.days)
        log.info("=" * 60)

        try:
            log.info("Step 1/3: Fetching rows...")
            rows = self._fetch()
            status["fetch_ok"] = True
            status["row_counts"] = {table: len(r) for table, r in rows.items()}

            log.info("Step 2/3: Building day records...")
            events = load_events(rows["daily_log"])
            journals = load_journals(rows["journals"])
            sleep_records = load_sleep_records(rows["sleep_export"])
            location_stats = load_location_stats(rows.get("location_log", []))
            day_records = aggregate_events(
                events, self.config.time_zone, self.config.pivot_hour, journals=journals,
            )

            log.info("Step 3/3: Running analyses...")
            report = build_insight_report(
                day_records, self.config, thresholds=thresholds,
                journals=journals, sleep_records=sleep_records, location_stats=location_stats,
            )
            status["report"] = report
            status["digest"] = render_digest(report)
            status["analysis_status"] = report["analysis_status"]
            status["degraded_reasons"] = list(report["degraded_reasons"])

        except Exception as e:
            status["analysis_status"] = "failed"
            status["degraded_reasons"] = ["fetch_failed" if not status["fetch_ok"] else "pipeline_exception"]
            log.error("Pipeline failed: %s", e)
            traceback.print_exc()
        finally:
            status["run_finished_at"] = datetime.utcnow().isoformat() + "Z"
            status["overall_status"] = self._overall_status(status)
            log.info("=" * 60)
            log.info("  LIFE-LOG INSIGHTS COMPLETE (status=%s)", status["overall_status"])
            log.info("=" * 60)

        return status

    def _fetch(self) -> Dict[str, List[Dict[str, Any]]]:
        since = date.today() - timedelta(days=self.days)
        return {
            table: fetch_rows(table, since=since, conn_str=self.conn_str)
            for table in ("daily_log", "journals", "sleep_export", "location_log")
        }

    @staticmethod
    def _overall_status(status: Dict[str, Any]) -> str:
        if not status.get("fetch_ok", False):
            return "failed"
        if status.get("analysis_status") in ("failed", "unknown"):
            return "failed"
        if status.get("analysis_status") == "degraded":
            return "degraded"
        return "success"

    @staticmethod
    def write_status_file(status: Dict[str, Any], path: Optional[str] = None) -> Optional[str]:
        today = date.today().isoformat()
        path = path or os.getenv("INSIGHTS_STATUS_PATH", f"insights_status_{today}.json")
        payload = {k: v for k, v in status.items() if k != "digest"}
        try:
            with open(path, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, ensure_ascii=False, default=str)
            log.info("Pipeline status written to %s", path)
            return path
        except OSError as e:
            log.warning("Failed to write pipeline status file: %s", e)
            return None
