"""
Data classes shared by the study modules.

An Item is a saved word plus its review state. Two review-state shapes
exist: the legacy ease-factor shape and the rich stability/difficulty
shape. Only the rich shape is authoritative once an item has been
converted; the legacy shape is kept for classification of old rows.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Optional

from vocab_srs.core.exceptions import MalformedItem


class Rating(IntEnum):
    """FSRS rating (4-point scale)."""

    AGAIN = 1  # Wrong answer
    HARD = 2   # Correct but slow
    GOOD = 3   # Correct with moderate effort
    EASY = 4   # Correct and fast


class ItemStatus(str, Enum):
    """Long-term learning status of an item."""

    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"
    OVERDUE = "overdue"


def normalize_term(term: str) -> str:
    """Trim and lowercase a term for case-insensitive comparison."""
    return term.strip().lower()


# fromisoformat only accepts 3 or 6 fractional digits before Python 3.11
_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def _six_digit_fraction(match: re.Match) -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp into a naive local datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = _FRACTION.sub(_six_digit_fraction, str(value).replace("Z", "+00:00"))
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class LegacyReviewState:
    """Ease-factor review state used before the FSRS migration."""

    interval: int = 0           # Days, 0 = review again now
    ease_factor: float = 2.5    # Multiplier for interval growth
    reps: int = 0               # Total review count
    correct: int = 0            # Correct review count
    next_review: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "interval": self.interval,
            "ease_factor": self.ease_factor,
            "review_count": self.reps,
            "correct_count": self.correct,
            "next_review": _format_datetime(self.next_review),
        }


@dataclass
class ReviewState:
    """Rich memory state for an item."""

    stability: float = 0.0      # Days until recall probability drops to 90%
    difficulty: float = 5.0     # 1 (easy) to 10 (hard)
    elapsed_days: int = 0
    scheduled_days: int = 0
    reps: int = 0
    lapses: int = 0
    last_review: Optional[datetime] = None
    next_review: Optional[datetime] = None
    last_rating: Optional[Rating] = None
    response_time_ms: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "stability": self.stability,
            "difficulty": self.difficulty,
            "elapsed_days": self.elapsed_days,
            "scheduled_days": self.scheduled_days,
            "reps": self.reps,
            "lapses": self.lapses,
            "last_review": _format_datetime(self.last_review),
            "next_review": _format_datetime(self.next_review),
            "last_rating": int(self.last_rating) if self.last_rating else None,
            "response_time_ms": self.response_time_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReviewState":
        rating = data.get("last_rating")
        return cls(
            stability=float(data.get("stability") or 0.0),
            difficulty=float(data.get("difficulty") or 5.0),
            elapsed_days=int(data.get("elapsed_days") or 0),
            scheduled_days=int(data.get("scheduled_days") or 0),
            reps=int(data.get("reps") or 0),
            lapses=int(data.get("lapses") or 0),
            last_review=parse_datetime(data.get("last_review")),
            next_review=parse_datetime(data.get("next_review")),
            last_rating=Rating(rating) if rating else None,
            response_time_ms=data.get("response_time_ms"),
        )


_RICH_KEYS = ("stability", "reps", "lapses", "elapsed_days")
_LEGACY_KEYS = ("interval", "ease_factor", "easeFactor", "review_count", "reviewCount")


@dataclass
class Item:
    """A saved word the learner practices."""

    term: str
    definition: str = ""
    example: str = ""
    review: Optional[ReviewState] = None
    legacy: Optional[LegacyReviewState] = None
    id: Optional[str] = None

    @property
    def normalized_term(self) -> str:
        return normalize_term(self.term)

    @property
    def next_review(self) -> Optional[datetime]:
        if self.review is not None:
            return self.review.next_review
        if self.legacy is not None:
            return self.legacy.next_review
        return None

    def review_state(self) -> ReviewState:
        """
        Return the authoritative rich state, converting legacy data once.

        After the first call the converted state is stored on the item, so
        repeated calls never convert again.
        """
        if self.review is None:
            if self.legacy is not None:
                from vocab_srs.study.legacy_scheduler import convert_legacy_to_rich

                self.review = convert_legacy_to_rich(self.legacy)
            else:
                self.review = ReviewState()
        return self.review

    def status_state(self) -> ReviewState | LegacyReviewState:
        """State used for status display: rich if present, else legacy."""
        if self.review is not None:
            return self.review
        if self.legacy is not None:
            return self.legacy
        return ReviewState()

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "term": self.term,
            "definition": self.definition,
            "example": self.example,
        }
        if self.id is not None:
            data["id"] = self.id
        if self.review is not None:
            data.update(self.review.to_dict())
        elif self.legacy is not None:
            data.update(self.legacy.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Item":
        """
        Build an item from a repository row.

        Accepts ``term`` or ``word`` as the identity key, and either the
        rich review columns or the legacy ones.

        Raises:
            MalformedItem: if the row has no non-blank term or its review
                data cannot be read
        """
        term = data.get("term", data.get("word"))
        if not isinstance(term, str) or not term.strip():
            raise MalformedItem(f"Item row has no term: {data!r}")

        review = None
        legacy = None
        try:
            if any(data.get(key) is not None for key in _RICH_KEYS):
                review = ReviewState.from_dict(data)
            elif any(data.get(key) is not None for key in _LEGACY_KEYS):
                reps = data.get("review_count", data.get("reviewCount")) or 0
                legacy = LegacyReviewState(
                    interval=int(data.get("interval") or 0),
                    ease_factor=float(data.get("ease_factor", data.get("easeFactor")) or 2.5),
                    reps=int(reps),
                    correct=int(data.get("correct_count", data.get("correctCount")) or 0),
                    next_review=parse_datetime(data.get("next_review", data.get("nextReview"))),
                )
        except (ValueError, TypeError) as e:
            raise MalformedItem(f"Unreadable review data for {term!r}: {e}") from e

        item_id = data.get("id")
        return cls(
            term=term,
            definition=data.get("definition") or "",
            example=data.get("example") or "",
            review=review,
            legacy=legacy,
            id=str(item_id) if item_id is not None else None,
        )


@dataclass
class SessionComposition:
    """Items selected for one practice session."""

    items: list[Item] = field(default_factory=list)
    skipped_malformed: int = 0

    @property
    def total(self) -> int:
        return len(self.items)
