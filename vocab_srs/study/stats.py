"""
Collection statistics over saved words.

Derived entirely from item review states:
- Status breakdown (new / learning / mastered / overdue)
- Stability histogram (10-day buckets)
- Aggregate FSRS metrics (averages, reviews, lapses, accuracy)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from vocab_srs.study.due_classifier import classify, is_due
from vocab_srs.study.legacy_scheduler import convert_legacy_to_rich
from vocab_srs.study.models import Item, ItemStatus, ReviewState

BUCKET_WIDTH_DAYS = 10
BUCKET_COUNT = 10

# Stability below this still counts as early learning in summaries
LEARNING_STABILITY = 7.0
MASTERED_STABILITY = 21.0


@dataclass
class StabilityBucket:
    range_label: str
    count: int
    percentage: float


@dataclass
class CollectionStats:
    """Dashboard summary for a word collection."""

    total_words: int = 0
    new_words: int = 0
    learning_words: int = 0
    mastered_words: int = 0
    due_words: int = 0
    average_stability: float = 0.0
    average_difficulty: float = 5.0
    total_reviews: int = 0
    total_lapses: int = 0
    accuracy_rate: float = 0.0
    status_breakdown: dict[str, int] = field(default_factory=dict)


def _rich_view(item: Item) -> ReviewState:
    """Rich state for reporting, converting legacy data without storing it on the item."""
    if item.review is not None:
        return item.review
    if item.legacy is not None:
        return convert_legacy_to_rich(item.legacy)
    return ReviewState()


def status_breakdown(items: Sequence[Item], now: Optional[datetime] = None) -> dict[str, int]:
    """Count items per status."""
    now = now or datetime.now()
    breakdown = {status.value: 0 for status in ItemStatus}
    for item in items:
        breakdown[classify(item.status_state(), now).value] += 1
    return breakdown


def stability_distribution(items: Sequence[Item]) -> list[StabilityBucket]:
    """Histogram of stability; the last bucket collects everything above 90 days."""
    counts = [0] * BUCKET_COUNT
    for item in items:
        stability = _rich_view(item).stability
        if stability > 0:
            index = min(int(stability // BUCKET_WIDTH_DAYS), BUCKET_COUNT - 1)
            counts[index] += 1

    total = len(items)
    return [
        StabilityBucket(
            range_label=f"{i * BUCKET_WIDTH_DAYS}-{(i + 1) * BUCKET_WIDTH_DAYS}",
            count=count,
            percentage=round(count / total * 100, 1) if total else 0.0,
        )
        for i, count in enumerate(counts)
    ]


def collection_summary(items: Sequence[Item], now: Optional[datetime] = None) -> CollectionStats:
    """Compute the dashboard summary for a collection."""
    now = now or datetime.now()
    if not items:
        return CollectionStats(status_breakdown=status_breakdown(items, now))

    states = [_rich_view(item) for item in items]
    total_reviews = sum(s.reps for s in states)
    total_lapses = sum(s.lapses for s in states)

    return CollectionStats(
        total_words=len(items),
        new_words=sum(1 for s in states if s.reps == 0),
        learning_words=sum(1 for s in states if s.reps > 0 and s.stability < LEARNING_STABILITY),
        mastered_words=sum(1 for s in states if s.stability >= MASTERED_STABILITY),
        due_words=sum(1 for item in items if is_due(item.status_state(), now)),
        average_stability=round(sum(s.stability for s in states) / len(states), 1),
        average_difficulty=round(sum(s.difficulty for s in states) / len(states), 1),
        total_reviews=total_reviews,
        total_lapses=total_lapses,
        accuracy_rate=round((total_reviews - total_lapses) / total_reviews * 100, 1)
        if total_reviews
        else 0.0,
        status_breakdown=status_breakdown(items, now),
    )
