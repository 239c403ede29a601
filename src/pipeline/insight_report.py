"""
Insight report — runs the standard dashboard analyses over one window of
day records and renders a plain-text digest.

Cards mirror the dashboard's insight grid: wake time vs. mood / energy,
work start vs. mood, bedtime vs. energy, plus work duration, the
wake-to-journal gap and previous-night bedtime vs. next-day energy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from analytics.averages import (
    average_duration,
    average_scores,
    average_time,
    average_time_outside,
)
from analytics.day_records import DayRecord, JournalEntry, LocationStats, SleepRecord
from analytics.feelings import tally_feelings
from analytics.insight_analyzers import (
    AnalyticsResult,
    analyze_duration_impact,
    analyze_event_score_relationship,
    analyze_previous_day_impact,
    analyze_sequential_events,
)
from analytics.time_normalization import format_time_to_ampm
from constants import EventType, ScoreType, default_thresholds
from settings import EngineConfig

log = logging.getLogger("insight_report")

DEFAULT_WORK_DURATION_HOURS = 8.0
DEFAULT_JOURNAL_GAP_HOURS = 1.0


@dataclass(frozen=True)
class InsightCard:
    key: str
    title: str
    threshold_key: str
    run: Callable[[Sequence[DayRecord], float, EngineConfig], AnalyticsResult]


def _event_card(event_type: EventType, score_type: ScoreType):
    def run(days, threshold, cfg):
        return analyze_event_score_relationship(
            days, event_type, score_type, threshold,
            pivot_hour=cfg.pivot_hour, min_sample_size=cfg.min_sample_size,
            max_score_diff=cfg.max_score_diff,
        )
    return run


def _duration_card(start: EventType, end: EventType, score_type: ScoreType):
    def run(days, threshold, cfg):
        return analyze_duration_impact(
            days, start, end, score_type, threshold,
            min_sample_size=cfg.min_sample_size, max_score_diff=cfg.max_score_diff,
        )
    return run


def _sequence_card(first: EventType, second: EventType, score_type: ScoreType):
    def run(days, threshold, cfg):
        return analyze_sequential_events(
            days, first, second, score_type, threshold,
            min_sample_size=cfg.min_sample_size, max_score_diff=cfg.max_score_diff,
        )
    return run


def _previous_day_card(event_type: EventType, score_type: ScoreType):
    def run(days, threshold, cfg):
        return analyze_previous_day_impact(
            days, event_type, score_type, threshold,
            pivot_hour=cfg.pivot_hour, min_sample_size=cfg.min_sample_size,
            max_score_diff=cfg.max_score_diff,
        )
    return run


STANDARD_CARDS: List[InsightCard] = [
    InsightCard("wake_mood", "Wake Time & Mood", "wake",
                _event_card(EventType.AWAKE, ScoreType.MOOD)),
    InsightCard("wake_energy", "Wake Time & Energy", "wake",
                _event_card(EventType.AWAKE, ScoreType.ENERGY)),
    InsightCard("work_mood", "Work Start Time & Mood", "work",
                _event_card(EventType.WORK_START, ScoreType.MOOD)),
    InsightCard("sleep_energy", "Sleep Time & Energy", "sleep",
                _event_card(EventType.ASLEEP, ScoreType.ENERGY)),
    InsightCard("work_duration_mood", "Work Duration & Mood", "work_duration",
                _duration_card(EventType.WORK_START, EventType.WORK_END, ScoreType.MOOD)),
    InsightCard("wake_journal_gap_mood", "Wake-to-Journal Gap & Mood", "journal_gap",
                _sequence_card(EventType.AWAKE, EventType.JOURNAL_START, ScoreType.MOOD)),
    InsightCard("previous_sleep_energy", "Previous Night's Sleep & Energy", "sleep",
                _previous_day_card(EventType.ASLEEP, ScoreType.ENERGY)),
]


def resolve_thresholds(config: EngineConfig,
                       overrides: Optional[Dict[str, float]] = None) -> Dict[str, float]:
    """Default slider positions, with any caller overrides applied."""
    thresholds = {key: tc.default for key, tc in default_thresholds(config.pivot_hour).items()}
    thresholds["work_duration"] = DEFAULT_WORK_DURATION_HOURS
    thresholds["journal_gap"] = DEFAULT_JOURNAL_GAP_HOURS
    for key, value in (overrides or {}).items():
        if key not in thresholds:
            raise ValueError(f"Unknown threshold: {key!r}")
        thresholds[key] = float(value)
    return thresholds


def build_insight_report(
    days: Sequence[DayRecord],
    config: Optional[EngineConfig] = None,
    thresholds: Optional[Dict[str, float]] = None,
    journals: Optional[Sequence[JournalEntry]] = None,
    sleep_records: Optional[Sequence[SleepRecord]] = None,
    location_stats: Optional[Sequence[LocationStats]] = None,
) -> Dict[str, Any]:
    """Run every standard card and collect the headline averages."""
    cfg = config or EngineConfig()
    resolved = resolve_thresholds(cfg, thresholds)

    cards: Dict[str, Dict[str, Any]] = {}
    n_sufficient = 0
    for card in STANDARD_CARDS:
        threshold = resolved[card.threshold_key]
        result = card.run(days, threshold, cfg)
        if result.is_sufficient:
            n_sufficient += 1
        cards[card.key] = {"title": card.title, "threshold": threshold, **result.to_dict()}

    times: Dict[str, Dict[str, Any]] = {}
    for event_type in EventType:
        avg = average_time(days, event_type, cfg.pivot_hour)
        times[event_type.value] = {"hour": avg, "display": format_time_to_ampm(avg)}

    averages: Dict[str, Any] = {"times": times, "scores": average_scores(days)}
    if sleep_records is not None:
        averages["sleep_in_bed_hours"] = average_duration(sleep_records, "in_bed")
    if location_stats is not None:
        averages["time_outside_hours"] = average_time_outside(location_stats)

    reasons: List[str] = []
    if not days:
        reasons.append("no_day_records")
    elif n_sufficient == 0:
        reasons.append("insufficient_data")

    report: Dict[str, Any] = {
        "window": {
            "days": len(days),
            "first_date": days[0].date.isoformat() if days else None,
            "last_date": days[-1].date.isoformat() if days else None,
            "time_zone": cfg.time_zone,
            "pivot_hour": cfg.pivot_hour,
        },
        "thresholds": resolved,
        "cards": cards,
        "averages": averages,
        "analysis_status": "degraded" if reasons else "success",
        "degraded_reasons": reasons,
    }
    if journals is not None:
        report["feelings"] = {
            category: [{"name": fc.name, "count": fc.count, "emoji": fc.emoji} for fc in counts]
            for category, counts in tally_feelings(journals).items()
        }
    log.info("Insight report: %d days, %d/%d cards with enough data",
             len(days), n_sufficient, len(STANDARD_CARDS))
    return report


def render_digest(report: Dict[str, Any]) -> str:
    """Plain-text digest of a report for logs and the CLI."""
    window = report["window"]
    lines: List[str] = []
    lines.append(f"=== LIFE-LOG INSIGHTS ({window['first_date']} -> {window['last_date']}) ===")
    lines.append(f"Data: {window['days']} days, pivot {window['pivot_hour']:g}h, {window['time_zone']}")
    if 0 < window["days"] < 14:
        lines.append(f"NOTE: Only {window['days']} days logged; treat findings as preliminary.")
    lines.append("")

    lines.append("[AVERAGES]")
    for event, info in report["averages"]["times"].items():
        lines.append(f"  {event}: {info['display']}")
    for score, value in report["averages"]["scores"].items():
        lines.append(f"  {score}: {value:.2f}")
    if report["averages"].get("sleep_in_bed_hours") is not None:
        lines.append(f"  in bed: {report['averages']['sleep_in_bed_hours']:.1f}h")
    if "time_outside_hours" in report["averages"]:
        lines.append(f"  time outside: {report['averages']['time_outside_hours']:.1f}h")
    lines.append("")

    lines.append("[INSIGHTS]")
    for card in report["cards"].values():
        stats = f"n={card['sampleSize']}, r={card['correlation']:+.2f}, {card['correlationStrength']}"
        if card["pValue"] is not None:
            approx = "~" if card["pValueMethod"] == "heuristic" else ""
            stats += f", p{approx}={card['pValue']:.3f}"
        if card["effectSize"] is not None:
            stats += f", d={card['effectSize']:.2f}"
        lines.append(f"  {card['title']} ({stats})")
        lines.append(f"    {card['insight']}")
    lines.append("")

    feelings = report.get("feelings")
    if feelings:
        lines.append("[FEELINGS]")
        for category, counts in feelings.items():
            if counts:
                top = ", ".join(f"{c['name']} x{c['count']}" for c in counts[:5])
                lines.append(f"  {category}: {top}")
        lines.append("")

    if report["degraded_reasons"]:
        lines.append("[ANALYSIS STATUS]")
        lines.append(f"  status={report['analysis_status']}")
        lines.append(f"  reasons={', '.join(report['degraded_reasons'])}")

    return "\n".join(lines).rstrip() + "\n"
