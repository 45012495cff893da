"""
Due-date classification for saved words.

Answers three display questions for an item's review state:
- Is it due now?
- Is it new, learning, mastered or overdue?
- What does its "due in N days" badge say?
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from vocab_srs.study.models import ItemStatus, LegacyReviewState, ReviewState

AnyReviewState = Union[ReviewState, LegacyReviewState]

SECONDS_PER_DAY = 24 * 60 * 60

# Stability (days) at which an item counts as mastered
MASTERED_STABILITY = 21.0
# Legacy interval (days) at which an item counts as mastered
MASTERED_LEGACY_INTERVAL = 30


class BadgeKind(str, Enum):
    NEW = "new"
    OVERDUE = "overdue"
    TODAY = "today"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class DueBadge:
    """Compact due-date badge shown next to a word."""

    kind: BadgeKind
    days: int = 0

    @property
    def label(self) -> str:
        if self.kind is BadgeKind.NEW:
            return "New"
        if self.kind is BadgeKind.OVERDUE:
            return f"-{self.days}d"
        if self.kind is BadgeKind.TODAY:
            return "Today"
        return f"+{self.days}d"


def is_due(state: AnyReviewState, now: Optional[datetime] = None) -> bool:
    """True when next_review is unset or has passed."""
    if state.next_review is None:
        return True
    return state.next_review <= (now or datetime.now())


def days_until_review(state: AnyReviewState, now: Optional[datetime] = None) -> int:
    """Whole days until next review, rounded up; negative when overdue."""
    if state.next_review is None:
        return 0
    delta = state.next_review - (now or datetime.now())
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def classify(state: AnyReviewState, now: Optional[datetime] = None) -> ItemStatus:
    """Classify an item as new, learning, mastered or overdue."""
    now = now or datetime.now()

    if (state.reps or 0) == 0:
        return ItemStatus.NEW

    if is_due(state, now) and days_until_review(state, now) < 0:
        return ItemStatus.OVERDUE

    if isinstance(state, ReviewState):
        if state.stability > 0:
            if state.stability >= MASTERED_STABILITY:
                return ItemStatus.MASTERED
            return ItemStatus.LEARNING
        interval = state.elapsed_days
    else:
        interval = state.interval

    # Legacy fallback: 10-29 days and younger items are both still learning
    if (interval or 0) >= MASTERED_LEGACY_INTERVAL:
        return ItemStatus.MASTERED
    return ItemStatus.LEARNING


def due_badge(state: AnyReviewState, now: Optional[datetime] = None) -> DueBadge:
    """Build the due-date badge for an item."""
    if state.next_review is None:
        return DueBadge(BadgeKind.NEW)

    days = days_until_review(state, now)
    if days < 0:
        return DueBadge(BadgeKind.OVERDUE, abs(days))
    if days == 0:
        return DueBadge(BadgeKind.TODAY)
    return DueBadge(BadgeKind.UPCOMING, days)
