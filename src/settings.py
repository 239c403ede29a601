"""Engine configuration loaded from .env"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from constants import DEFAULT_PIVOT_HOUR, DEFAULT_TIME_ZONE, MAX_SCORE_DIFF, MIN_SAMPLE_SIZE


@dataclass(frozen=True)
class EngineConfig:
    """Time zone and pivot hour shared by aggregation and analyzers."""

    time_zone: str = DEFAULT_TIME_ZONE
    pivot_hour: float = DEFAULT_PIVOT_HOUR
    max_score_diff: float = MAX_SCORE_DIFF
    min_sample_size: int = MIN_SAMPLE_SIZE

    def __post_init__(self):
        if not isinstance(self.pivot_hour, (int, float)) or not 0 <= self.pivot_hour < 24:
            raise ValueError(f"pivot_hour must be in [0, 24), got {self.pivot_hour!r}")
        if self.max_score_diff <= 0:
            raise ValueError("max_score_diff must be positive")
        if self.min_sample_size < MIN_SAMPLE_SIZE:
            raise ValueError(
                f"min_sample_size must be at least {MIN_SAMPLE_SIZE}, got {self.min_sample_size!r}"
            )

    @classmethod
    def from_env(cls) -> "EngineConfig":
        load_dotenv()
        return cls(
            time_zone=os.getenv("INSIGHTS_TIME_ZONE", DEFAULT_TIME_ZONE),
            pivot_hour=float(os.getenv("DAY_PIVOT_HOUR", str(DEFAULT_PIVOT_HOUR))),
            max_score_diff=float(os.getenv("INSIGHTS_MAX_SCORE_DIFF", str(MAX_SCORE_DIFF))),
        )
