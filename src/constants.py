"""
Shared constants used across multiple modules.
Single source of truth for event / score vocabularies and insight phrasing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict

DEFAULT_PIVOT_HOUR = 18   # 6PM start of the logical day
DEFAULT_TIME_ZONE = "UTC"
HOURS_IN_DAY = 24
MIN_SAMPLE_SIZE = 3
MAX_SCORE_DIFF = 10.0     # mood / energy are rated 0-10


class EventType(str, Enum):
    """Closed set of daily_log event types."""

    ASLEEP = "asleep"
    AWAKE = "awake"
    JOURNAL_START = "journal_start"
    WORK_START = "work_start"
    WORK_END = "work_end"

    @classmethod
    def parse(cls, value) -> "EventType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            raise ValueError(f"Unknown event type: {value!r}") from None


class ScoreType(str, Enum):
    MOOD = "mood_score"
    ENERGY = "energy_score"

    @classmethod
    def parse(cls, value) -> "ScoreType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            raise ValueError(f"Unknown score type: {value!r}") from None


# Phrasing used by the insight text generator
EVENT_ACTIONS: Dict[EventType, str] = {
    EventType.ASLEEP: "go to sleep",
    EventType.AWAKE: "wake up",
    EventType.JOURNAL_START: "start journaling",
    EventType.WORK_START: "start work",
    EventType.WORK_END: "finish work",
}

EVENT_GERUNDS: Dict[EventType, str] = {
    EventType.ASLEEP: "going to sleep",
    EventType.AWAKE: "waking up",
    EventType.JOURNAL_START: "journaling",
    EventType.WORK_START: "starting work",
    EventType.WORK_END: "ending work",
}

SCORE_LABELS: Dict[ScoreType, str] = {
    ScoreType.MOOD: "mood",
    ScoreType.ENERGY: "energy",
}


# ─── Threshold sliders ────────────────────────────────────────
# Slider values are expressed as pivot_hour + clock hour.


@dataclass(frozen=True)
class ThresholdConfig:
    min: float
    max: float
    default: float
    event_type: EventType
    label: str


def default_thresholds(pivot_hour: float = DEFAULT_PIVOT_HOUR) -> Dict[str, ThresholdConfig]:
    """Slider bounds for the early/late split of each timed event."""
    return {
        "wake": ThresholdConfig(
            min=pivot_hour + 4,       # 4AM
            max=pivot_hour + 10,      # 10AM
            default=pivot_hour + 6,   # 6AM
            event_type=EventType.AWAKE,
            label="Early wake threshold",
        ),
        "work": ThresholdConfig(
            min=pivot_hour + 6,       # 6AM
            max=pivot_hour + 12,      # 12PM
            default=pivot_hour + 8,   # 8AM
            event_type=EventType.WORK_START,
            label="Early work threshold",
        ),
        "sleep": ThresholdConfig(
            min=pivot_hour + 20,      # 8PM
            max=pivot_hour + 26,      # 2AM next day
            default=pivot_hour + 22,  # 10PM
            event_type=EventType.ASLEEP,
            label="Early sleep threshold",
        ),
    }
