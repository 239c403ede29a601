"""
Life-Log Insights — command-line runner
=======================================
Fetches the last N days of daily_log / journals / sleep_export rows,
builds day records and prints the insight digest.

Usage:
    python insights_sync.py                     # last 14 days, settings from .env
    python insights_sync.py --days 30 --json    # full report as JSON
    python insights_sync.py --pivot-hour 4 --time-zone Europe/Berlin
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

from pipeline.insights_pipeline import InsightsPipeline
from settings import EngineConfig

log = logging.getLogger("insights_sync")


def _parse_threshold(raw: str):
    key, sep, value = raw.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected key=value, got {raw!r}")
    try:
        return key.strip(), float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"threshold {key!r} must be numeric") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Life-log insight digest")
    parser.add_argument("--days", type=int, default=14, help="Window size in days (default 14)")
    parser.add_argument("--pivot-hour", type=float, default=None, help="Start hour of the logical day")
    parser.add_argument("--time-zone", default=None, help="Reference time zone, e.g. Europe/London")
    parser.add_argument("--threshold", action="append", type=_parse_threshold, default=[],
                        metavar="KEY=VALUE",
                        help="Override a threshold (wake, work, sleep, work_duration, journal_gap)")
    parser.add_argument("--json", action="store_true", help="Print the full report as JSON")
    parser.add_argument("--status-file", action="store_true", help="Write a status JSON file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = EngineConfig.from_env()
    except ValueError as e:
        parser.error(f"invalid settings in environment: {e}")
    if args.pivot_hour is not None:
        try:
            config = replace(config, pivot_hour=args.pivot_hour)
        except ValueError as e:
            parser.error(f"--pivot-hour: {e}")
    if args.time_zone:
        config = replace(config, time_zone=args.time_zone)

    pipeline = InsightsPipeline(config=config, days=args.days)
    status = pipeline.run(thresholds=dict(args.threshold) or None)
    if args.status_file:
        pipeline.write_status_file(status)

    if status["report"] is not None:
        if args.json:
            print(json.dumps(status["report"], indent=2, ensure_ascii=False, default=str))
        else:
            print(status["digest"])

    return 0 if status["overall_status"] != "failed" else 1


if __name__ == "__main__":
    sys.exit(main())
