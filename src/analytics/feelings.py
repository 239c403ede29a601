"""Tallies of the feelings and states tagged on journal entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from analytics.day_records import JournalEntry

# journal attribute -> category
FEELING_CATEGORIES = {
    "positive_feelings": "positive",
    "negative_feelings": "negative",
    "cognitive_states": "cognitive",
    "physical_states": "physical",
}


@dataclass
class FeelingCount:
    name: str
    count: int
    category: str
    emoji: Optional[str] = None


def _split_tag(tag: str):
    """'Happy 😊' -> ('Happy', '😊')"""
    parts = tag.strip().split(" ", 1)
    name = parts[0]
    emoji = parts[1].strip() if len(parts) > 1 and parts[1].strip() else None
    return name, emoji


def tally_feelings(journals: Iterable[JournalEntry]) -> Dict[str, List[FeelingCount]]:
    """Count tags per category, most frequent first.

    Tags are matched case-insensitively; the first spelling seen is kept.
    """
    counts: Dict[str, Dict[str, FeelingCount]] = {c: {} for c in FEELING_CATEGORIES.values()}
    for entry in journals:
        for attr, category in FEELING_CATEGORIES.items():
            for tag in getattr(entry, attr, ()) or ():
                if not tag or not tag.strip():
                    continue
                name, emoji = _split_tag(tag)
                key = name.lower()
                bucket = counts[category]
                if key in bucket:
                    bucket[key].count += 1
                else:
                    bucket[key] = FeelingCount(name=name, count=1, category=category, emoji=emoji)

    return {
        category: sorted(bucket.values(), key=lambda fc: (-fc.count, fc.name.lower()))
        for category, bucket in counts.items()
    }
