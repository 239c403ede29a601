"""
Insight analyzers — timing behaviour vs. self-reported mood / energy.

Four analysis modes share one comparison core:
  A. event_score_relationship  : event time of day vs. same-day score
  B. duration_impact           : start→end duration vs. score
  C. sequential_events         : gap between two events vs. score
  D. previous_day_impact       : previous evening's event time vs. score

Each mode builds (measure, score) pairs from day records, splits them into
two cohorts around a threshold, and reports Pearson r, Cohen's d, pooled
standard deviation and a p-value together with an insight sentence.

Thresholds for time-of-day modes (A, D) are slider values expressed as
pivot_hour + clock hour; duration / gap thresholds (B, C) are in hours.
Fewer than MIN_SAMPLE_SIZE pairs, or an empty cohort, is a normal result
state, never an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from analytics.day_records import DayRecord
from analytics.stats_primitives import (
    CorrelationStrength,
    correlation,
    correlation_strength,
    effect_size,
    mean,
    p_value,
    pooled_standard_deviation,
)
from analytics.time_normalization import cohort_hour, format_time_to_ampm
from constants import (
    DEFAULT_PIVOT_HOUR,
    EVENT_ACTIONS,
    EVENT_GERUNDS,
    HOURS_IN_DAY,
    MAX_SCORE_DIFF,
    MIN_SAMPLE_SIZE,
    SCORE_LABELS,
    EventType,
    ScoreType,
)

log = logging.getLogger("insight_analyzers")

NOT_ENOUGH_DATA_INSIGHT = "Not enough data to analyze this relationship yet (need at least 3 days)."
NO_RELATIONSHIP_CUTOFF = 0.1

# (max p, min d, qualifier), strongest first
CONFIDENCE_TIERS = (
    (0.01, 0.8, "very strong evidence"),
    (0.05, 0.5, "strong evidence"),
    (0.1, 0.2, "some evidence"),
)


@dataclass
class AnalyticsResult:
    correlation: float = 0.0
    correlation_strength: CorrelationStrength = CorrelationStrength.INSUFFICIENT_DATA
    average_score: float = 0.0
    sample_size: int = 0
    insight: str = NOT_ENOUGH_DATA_INSIGHT
    p_value: Optional[float] = None
    effect_size: Optional[float] = None
    standard_dev: Optional[float] = None
    p_value_method: Optional[str] = None

    @property
    def is_sufficient(self) -> bool:
        return self.correlation_strength is not CorrelationStrength.INSUFFICIENT_DATA

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correlation": round(self.correlation, 3),
            "correlationStrength": self.correlation_strength.value,
            "averageScore": round(self.average_score, 2),
            "sampleSize": self.sample_size,
            "insight": self.insight,
            "pValue": None if self.p_value is None else round(self.p_value, 4),
            "effectSize": None if self.effect_size is None else round(self.effect_size, 3),
            "standardDev": None if self.standard_dev is None else round(self.standard_dev, 3),
            "pValueMethod": self.p_value_method,
        }


@dataclass(frozen=True)
class _Framing:
    """Phrasing for one analysis: what is measured and how cohorts read."""

    subject: str       # "when you go to sleep"
    score_phrase: str  # "mood" / "next-day energy"
    low_context: str   # "on days you go to sleep earlier (by 12:00 AM)"
    high_context: str  # "on days you go to sleep later"
    low_label: str     # "earlier"
    high_label: str    # "later"


def confidence_qualifier(p: Optional[float], d: Optional[float]) -> Optional[str]:
    if p is None or d is None:
        return None
    for max_p, min_d, label in CONFIDENCE_TIERS:
        if p < max_p and d > min_d:
            return label
    return None


def _insufficient(sample_size: int) -> AnalyticsResult:
    return AnalyticsResult(sample_size=sample_size)


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def _compare_cohorts(
    pairs: Sequence[Tuple[float, float]],
    is_low: Sequence[bool],
    framing: _Framing,
    min_sample_size: int,
    max_score_diff: float,
) -> AnalyticsResult:
    """Shared statistics + insight text for all analysis modes."""
    n = len(pairs)
    # a caller may raise the floor, never lower it
    if n < max(min_sample_size, MIN_SAMPLE_SIZE):
        log.debug("Insufficient pairs for %s: %d", framing.subject, n)
        return _insufficient(n)

    measures = [m for m, _ in pairs]
    scores = [s for _, s in pairs]
    low = [s for (_, s), flag in zip(pairs, is_low) if flag]
    high = [s for (_, s), flag in zip(pairs, is_low) if not flag]

    r = correlation(measures, scores)
    strength = correlation_strength(r)

    if not low or not high:
        only = framing.low_label if low else framing.high_label
        return AnalyticsResult(
            correlation=r,
            correlation_strength=strength,
            average_score=mean(low or high),
            sample_size=n,
            insight=(
                f"Need more varied timing data: all {n} days fall in the {only} group, "
                f"so {framing.subject} cannot be compared yet."
            ),
        )

    low_avg, high_avg = mean(low), mean(high)
    d = effect_size(low, high)
    p = p_value(low, high, max_diff=max_score_diff)
    sd = pooled_standard_deviation(low, high)

    result = AnalyticsResult(
        correlation=r,
        correlation_strength=strength,
        average_score=low_avg,
        sample_size=n,
        p_value=p.value if p else None,
        effect_size=d,
        standard_dev=sd,
        p_value_method=p.method if p else None,
    )

    if abs(r) < NO_RELATIONSHIP_CUTOFF:
        result.insight = (
            f"No clear relationship found between {framing.subject} "
            f"and your {framing.score_phrase} over {n} days."
        )
        return result

    if low_avg >= high_avg:
        better_avg, better_ctx, worse_avg, worse_ctx = low_avg, framing.low_context, high_avg, framing.high_context
    else:
        better_avg, better_ctx, worse_avg, worse_ctx = high_avg, framing.high_context, low_avg, framing.low_context

    sentence = (
        f"your {framing.score_phrase} averages {better_avg:.1f} {better_ctx} "
        f"vs {worse_avg:.1f} {worse_ctx}, a {better_avg - worse_avg:.1f}-point difference."
    )
    qualifier = confidence_qualifier(result.p_value, d)
    if qualifier:
        result.insight = f"There is {qualifier} that {sentence}"
    else:
        result.insight = _capitalize(sentence)
    return result


def _span(start: float, end: float) -> float:
    """Hours from start to end on the clock, wrapping past midnight."""
    delta = (end % HOURS_IN_DAY) - (start % HOURS_IN_DAY)
    return delta + HOURS_IN_DAY if delta < 0 else delta


# ─── A. Event → same-day score ────────────────────────────────


def analyze_event_score_relationship(
    days: Sequence[DayRecord],
    event_type,
    score_type,
    early_threshold: float,
    *,
    pivot_hour: float = DEFAULT_PIVOT_HOUR,
    min_sample_size: int = MIN_SAMPLE_SIZE,
    max_score_diff: float = MAX_SCORE_DIFF,
) -> AnalyticsResult:
    event_type = EventType.parse(event_type)
    score_type = ScoreType.parse(score_type)
    cutoff = early_threshold - pivot_hour

    pairs: List[Tuple[float, float]] = []
    for day in days:
        if not day.has(event_type, score_type):
            continue
        pairs.append((cohort_hour(day.get(event_type), event_type, pivot_hour), day.get(score_type)))

    action = EVENT_ACTIONS[event_type]
    framing = _Framing(
        subject=f"when you {action}",
        score_phrase=SCORE_LABELS[score_type],
        low_context=f"on days you {action} earlier (by {format_time_to_ampm(cutoff)})",
        high_context=f"on days you {action} later",
        low_label="earlier",
        high_label="later",
    )
    return _compare_cohorts(pairs, [h <= cutoff for h, _ in pairs], framing,
                            min_sample_size, max_score_diff)


# ─── B. Duration → score ──────────────────────────────────────

DURATION_SUBJECTS = {
    (EventType.WORK_START, EventType.WORK_END): "work sessions",
    (EventType.AWAKE, EventType.ASLEEP): "waking days",
}


def analyze_duration_impact(
    days: Sequence[DayRecord],
    start_event_type,
    end_event_type,
    score_type,
    duration_threshold: float,
    *,
    min_sample_size: int = MIN_SAMPLE_SIZE,
    max_score_diff: float = MAX_SCORE_DIFF,
) -> AnalyticsResult:
    start_event_type = EventType.parse(start_event_type)
    end_event_type = EventType.parse(end_event_type)
    score_type = ScoreType.parse(score_type)

    pairs: List[Tuple[float, float]] = []
    for day in days:
        if not day.has(start_event_type, end_event_type, score_type):
            continue
        duration = _span(day.get(start_event_type), day.get(end_event_type))
        pairs.append((duration, day.get(score_type)))

    subject = DURATION_SUBJECTS.get(
        (start_event_type, end_event_type),
        f"{EVENT_GERUNDS[start_event_type]}-to-{EVENT_GERUNDS[end_event_type]} spans",
    )
    framing = _Framing(
        subject=f"the length of your {subject}",
        score_phrase=SCORE_LABELS[score_type],
        low_context=f"on days with shorter {subject} ({duration_threshold:g}h or less)",
        high_context=f"on days with longer {subject}",
        low_label="shorter",
        high_label="longer",
    )
    return _compare_cohorts(pairs, [dur <= duration_threshold for dur, _ in pairs], framing,
                            min_sample_size, max_score_diff)


# ─── C. Gap between two events → score ────────────────────────


def analyze_sequential_events(
    days: Sequence[DayRecord],
    first_event_type,
    second_event_type,
    score_type,
    gap_threshold: float,
    *,
    min_sample_size: int = MIN_SAMPLE_SIZE,
    max_score_diff: float = MAX_SCORE_DIFF,
) -> AnalyticsResult:
    first_event_type = EventType.parse(first_event_type)
    second_event_type = EventType.parse(second_event_type)
    score_type = ScoreType.parse(score_type)

    pairs: List[Tuple[float, float]] = []
    for day in days:
        if not day.has(first_event_type, second_event_type, score_type):
            continue
        gap = _span(day.get(first_event_type), day.get(second_event_type))
        pairs.append((gap, day.get(score_type)))

    between = f"{EVENT_GERUNDS[first_event_type]} and {EVENT_GERUNDS[second_event_type]}"
    framing = _Framing(
        subject=f"the gap between {between}",
        score_phrase=SCORE_LABELS[score_type],
        low_context=f"on days with a shorter gap between {between} ({gap_threshold:g}h or less)",
        high_context="on days with a longer gap",
        low_label="shorter gap",
        high_label="longer gap",
    )
    return _compare_cohorts(pairs, [gap <= gap_threshold for gap, _ in pairs], framing,
                            min_sample_size, max_score_diff)


# ─── D. Previous day's event → next-day score ─────────────────


def analyze_previous_day_impact(
    days: Sequence[DayRecord],
    event_type,
    score_type,
    threshold: float,
    *,
    pivot_hour: float = DEFAULT_PIVOT_HOUR,
    min_sample_size: int = MIN_SAMPLE_SIZE,
    max_score_diff: float = MAX_SCORE_DIFF,
) -> AnalyticsResult:
    event_type = EventType.parse(event_type)
    score_type = ScoreType.parse(score_type)
    cutoff = threshold - pivot_hour
    by_date = {day.date: day for day in days}

    pairs: List[Tuple[float, float]] = []
    for day in days:
        score = day.get(score_type)
        if score is None:
            continue
        previous = by_date.get(day.date - timedelta(days=1))
        if previous is None or previous.get(event_type) is None:
            continue
        pairs.append((cohort_hour(previous.get(event_type), event_type, pivot_hour), score))

    action = EVENT_ACTIONS[event_type]
    framing = _Framing(
        subject=f"when you {action} the night before",
        score_phrase=f"next-day {SCORE_LABELS[score_type]}",
        low_context=f"after days you {action} earlier (by {format_time_to_ampm(cutoff)})",
        high_context=f"after days you {action} later",
        low_label="earlier",
        high_label="later",
    )
    return _compare_cohorts(pairs, [h <= cutoff for h, _ in pairs], framing,
                            min_sample_size, max_score_diff)
