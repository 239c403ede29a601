"""
Shared test configuration.

Adds src/ to sys.path so the flat modules (constants, settings, api, …)
and the analytics / pipeline packages import exactly as they do at runtime.
Also provides small day-record builders used across test modules.
"""

import os
import sys
from datetime import date, timedelta

import pytest

_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_src_dir = os.path.join(_project_root, "src")

if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from analytics.day_records import DayRecord  # noqa: E402


def make_days(rows, start=date(2024, 1, 1)):
    """Build consecutive DayRecords from a list of field dicts."""
    return [DayRecord(start + timedelta(days=i), values) for i, values in enumerate(rows)]


@pytest.fixture
def day_builder():
    return make_days
