"""
Legacy ease-factor scheduler and the one-time migration to FSRS.

Ease-factor rules:
- First correct answer (interval 0) -> review tomorrow
- Second correct answer (interval 1) -> review in 3 days
- Later correct answers -> interval * ease factor, capped at a year
- Any wrong answer -> interval 0 (due now) and a lower ease factor
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from loguru import logger

from vocab_srs.study.models import LegacyReviewState, ReviewState
from vocab_srs.study.retention_engine import clamp, round_half_up


@dataclass
class LegacyConfig:
    """Configuration for the ease-factor model."""

    minimum_easiness: float = 1.3
    maximum_easiness: float = 3.0
    correct_bonus: float = 0.1
    incorrect_penalty: float = 0.2
    first_interval: int = 1  # Days after the first correct answer
    second_interval: int = 3  # Days after the second correct answer
    maximum_interval: int = 365


class LegacyScheduler:
    """
    Ease-factor spaced repetition model.

    Each item has:
    - Ease factor: how fast intervals grow (2.5 default, 1.3-3.0)
    - Interval: days until next review (0 = again now)
    - Reps / correct: review history counters
    """

    def __init__(self, config: LegacyConfig | None = None):
        self.config = config or LegacyConfig()

    def update(
        self,
        state: LegacyReviewState,
        is_correct: bool,
        now: Optional[datetime] = None,
    ) -> LegacyReviewState:
        """
        Calculate the next legacy state after an answer.

        Args:
            state: Current legacy state
            is_correct: Whether the answer matched
            now: Review time (defaults to now)

        Returns:
            New LegacyReviewState
        """
        now = now or datetime.now()
        cfg = self.config

        interval = max(0, int(state.interval or 0))
        ease = clamp(state.ease_factor or 2.5, cfg.minimum_easiness, cfg.maximum_easiness)
        reps = max(0, state.reps or 0)
        correct = min(max(0, state.correct or 0), reps)

        if is_correct:
            if interval == 0:
                interval = cfg.first_interval
            elif interval == 1:
                interval = cfg.second_interval
            else:
                interval = round_half_up(interval * ease)
            interval = min(interval, cfg.maximum_interval)
            ease = min(ease + cfg.correct_bonus, cfg.maximum_easiness)
            correct += 1
        else:
            interval = 0
            ease = max(ease - cfg.incorrect_penalty, cfg.minimum_easiness)

        return LegacyReviewState(
            interval=interval,
            ease_factor=round(ease, 4),
            reps=reps + 1,
            correct=correct,
            next_review=now + timedelta(days=interval),
        )


_default_scheduler = LegacyScheduler()


def update_legacy(
    state: LegacyReviewState,
    is_correct: bool,
    now: Optional[datetime] = None,
) -> LegacyReviewState:
    """Update a legacy state with the default configuration."""
    return _default_scheduler.update(state, is_correct, now=now)


def convert_legacy_to_rich(legacy: LegacyReviewState) -> ReviewState:
    """
    Convert legacy ease-factor data to an initial FSRS state.

    Stability is seeded from the existing interval, difficulty from the
    historical accuracy.
    """
    reps = max(0, legacy.reps or 0)
    correct = min(max(0, legacy.correct or 0), reps)
    interval = max(0, legacy.interval or 0)

    if reps == 0:
        stability = 0.0
    elif reps == 1:
        stability = max(1.0, interval * 0.8)
    else:
        stability = max(1.0, interval * 0.9)

    difficulty = 5.0
    if reps > 0:
        accuracy = correct / reps
        if accuracy > 0.9:
            difficulty = 3.0
        elif accuracy > 0.7:
            difficulty = 5.0
        elif accuracy > 0.5:
            difficulty = 7.0
        else:
            difficulty = 9.0

    logger.debug(
        f"Converted legacy state (interval={interval}, reps={reps}, correct={correct}) "
        f"-> stability={stability:.2f}, difficulty={difficulty}"
    )

    return ReviewState(
        stability=stability,
        difficulty=difficulty,
        elapsed_days=interval,
        scheduled_days=interval,
        reps=reps,
        lapses=reps - correct,
        next_review=legacy.next_review,
    )
