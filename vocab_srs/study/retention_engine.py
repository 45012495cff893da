"""
Retention Engine - FSRS-style memory model for vocabulary review.

Maps a recall outcome to an updated stability/difficulty pair and the
number of days until the next review:

1. Rating - correctness plus response latency -> Again/Hard/Good/Easy
2. Stability - closed-form update per rating, clamped to [0.1, 36500]
3. Difficulty - additive delta per rating, clamped to [1, 10]
4. Interval - derived from stability, corrected for overdue reviews

All inputs are clamped instead of rejected so a corrupted or migrated
review state degrades gracefully.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from loguru import logger

from vocab_srs.core.exceptions import InvalidRating
from vocab_srs.study.models import Rating, ReviewState


# =============================================================================
# FSRS CONSTANTS (tuned for vocabulary recall)
# =============================================================================

FSRS_PARAMS = {
    "w": [
        0.4,    # w0: Again stability factor
        0.6,    # w1: Again stability exponent
        2.4,    # w2: Again difficulty weight
        5.8,    # w3: Hard stability multiplier
        4.93,   # w4: Good stability multiplier
        0.94,   # w5: Good difficulty weight
        0.86,   # w6: Easy stability multiplier
        0.01,   # w7: Easy difficulty weight
        1.49,   # w8: Again difficulty delta
        0.14,   # w9: Hard difficulty delta
        0.94,   # w10: Good difficulty delta
        2.18,   # w11: Easy difficulty delta
        0.05,   # w12: overdue forgetting factor
        0.34,   # w13: overdue forgetting exponent
        1.26,   # w14
        0.29,   # w15
        2.61,   # w16
    ],
    "requestRetention": 0.90,   # Target 90% recall
    "maximumInterval": 36500,   # 100 years
    "defaultDifficulty": 5.0,
    "easyThresholdMs": 2000,
    "goodThresholdMs": 5000,
}

MIN_STABILITY = 0.1
MAX_STABILITY = 36500.0
MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0

# Interval multiplier applied to stability after a failed recall
AGAIN_INTERVAL_FACTOR = 0.25

_LN_09 = math.log(0.9)


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]; NaN falls to lower."""
    if value != value:  # NaN
        return lower
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """Round halves up (2.5 -> 3), unlike the built-in round()."""
    return int(math.floor(value + 0.5))


def params_from_settings(settings) -> dict:
    """Build an FSRS parameter dict from application settings."""
    fsrs = settings.get_fsrs_config()
    return {
        **FSRS_PARAMS,
        "requestRetention": fsrs["request_retention"],
        "maximumInterval": fsrs["maximum_interval"],
        "defaultDifficulty": fsrs["default_difficulty"],
        "easyThresholdMs": fsrs["easy_threshold_ms"],
        "goodThresholdMs": fsrs["good_threshold_ms"],
    }


class FSRSScheduler:
    """
    FSRS-style spaced repetition scheduler.

    Pure functions over a ReviewState; holds only its parameters.
    """

    def __init__(self, params: dict = None):
        self.params = params or FSRS_PARAMS
        self.w = self.params["w"]
        self.request_retention = self.params["requestRetention"]
        self.max_interval = self.params["maximumInterval"]
        self.default_difficulty = self.params.get("defaultDifficulty", 5.0)
        self.easy_threshold_ms = self.params.get("easyThresholdMs", 2000)
        self.good_threshold_ms = self.params.get("goodThresholdMs", 5000)

    def determine_rating(self, is_correct: bool, response_time_ms: float) -> Rating:
        """
        Convert a response to a rating.

        Wrong answers are always Again; correct answers are graded by speed.
        """
        if not is_correct:
            return Rating.AGAIN

        if response_time_ms < self.easy_threshold_ms:
            return Rating.EASY
        elif response_time_ms < self.good_threshold_ms:
            return Rating.GOOD
        else:
            return Rating.HARD

    def calculate_stability(self, stability: float, difficulty: float, rating: Rating) -> float:
        """Calculate new memory stability for a rating."""
        w = self.w
        s = clamp(stability, 0.0, MAX_STABILITY)
        d = clamp(difficulty, MIN_DIFFICULTY, MAX_DIFFICULTY)
        rating = _check_rating(rating)

        if rating is Rating.AGAIN:
            new_s = w[0] * math.pow(s, w[1]) * math.exp((1 - d) * w[2])
        elif rating is Rating.HARD:
            new_s = s * w[3]
        elif rating is Rating.GOOD:
            new_s = s * w[4] * math.exp((1 - d) * w[5])
        else:
            new_s = s * w[6] * math.exp((1 - d) * w[7])

        return clamp(new_s, MIN_STABILITY, MAX_STABILITY)

    def calculate_difficulty(self, difficulty: float, rating: Rating) -> float:
        """Shift difficulty by the rating's delta."""
        rating = _check_rating(rating)
        delta = self.w[7 + int(rating)]  # w8..w11
        d = clamp(difficulty, MIN_DIFFICULTY, MAX_DIFFICULTY)
        return clamp(d + delta, MIN_DIFFICULTY, MAX_DIFFICULTY)

    def calculate_next_review(
        self,
        state: ReviewState,
        rating: Rating,
        response_time_ms: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ReviewState:
        """
        Process a review and return the new memory state.

        The returned state carries the new interval in both
        ``elapsed_days`` and ``scheduled_days``.
        """
        now = now or datetime.now()
        rating = _check_rating(rating)

        stability = state.stability or 0.0
        difficulty = state.difficulty or self.default_difficulty
        elapsed_days = max(0, state.elapsed_days or 0)
        scheduled_days = max(0, state.scheduled_days or 0)
        reps = max(0, state.reps or 0)
        lapses = clamp(state.lapses or 0, 0, reps)

        new_stability = self.calculate_stability(stability, difficulty, rating)
        new_difficulty = self.calculate_difficulty(difficulty, rating)

        if rating is Rating.AGAIN:
            interval = round_half_up(new_stability * AGAIN_INTERVAL_FACTOR)
        else:
            interval = round_half_up(new_stability)
        interval = max(1, interval)

        # Forgetting correction for overdue reviews
        if elapsed_days > scheduled_days > 0:
            adjustment = self.w[12] * math.exp(
                min(700.0, (elapsed_days - scheduled_days) * self.w[13])
            )
            interval = max(1, round_half_up(interval * adjustment))

        interval = min(interval, self.max_interval)

        logger.debug(
            f"FSRS review: rating={rating.name} stability {stability:.2f}->{new_stability:.2f} "
            f"difficulty {difficulty:.2f}->{new_difficulty:.2f} interval={interval}d"
        )

        return ReviewState(
            stability=new_stability,
            difficulty=new_difficulty,
            elapsed_days=interval,
            scheduled_days=interval,
            reps=reps + 1,
            lapses=int(lapses) + (1 if rating is Rating.AGAIN else 0),
            last_review=now,
            next_review=now + timedelta(days=interval),
            last_rating=rating,
            response_time_ms=response_time_ms,
        )

    def calculate_retention_probability(self, stability: float, elapsed_days: float) -> float:
        """Calculate recall probability (0-1) after elapsed_days."""
        if stability <= 0:
            return 0.0
        return clamp(math.exp(_LN_09 * max(0.0, elapsed_days) / stability), 0.0, 1.0)

    def get_optimal_interval(self, stability: float, target_retention: Optional[float] = None) -> int:
        """Convert stability to the interval that hits target_retention."""
        if stability <= 0:
            return 1
        if target_retention is None:
            target_retention = self.request_retention
        target = clamp(target_retention, 0.01, 0.99)
        interval = stability * math.log(target) / _LN_09
        return max(1, min(self.max_interval, round_half_up(interval)))

    @staticmethod
    def with_elapsed_days(state: ReviewState, now: Optional[datetime] = None) -> ReviewState:
        """
        Return a copy of state whose elapsed_days is measured from last_review.

        Stored states carry elapsed_days == scheduled_days; refreshing it at
        review time lets the overdue correction see how late the review is.
        """
        if state.last_review is None:
            return state
        now = now or datetime.now()
        elapsed = max(0, (now - state.last_review).days)
        return replace(state, elapsed_days=elapsed)

    def review(
        self,
        state: ReviewState,
        is_correct: bool,
        response_time_ms: int,
        now: Optional[datetime] = None,
    ) -> ReviewState:
        """Rate a response and schedule the next review in one step."""
        rating = self.determine_rating(is_correct, response_time_ms)
        return self.calculate_next_review(state, rating, response_time_ms, now=now)


def _check_rating(rating: object) -> Rating:
    if isinstance(rating, Rating):
        return rating
    if isinstance(rating, int) and not isinstance(rating, bool):
        try:
            return Rating(rating)
        except ValueError:
            pass
    raise InvalidRating(rating)
