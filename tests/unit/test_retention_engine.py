"""Tests for the FSRS-style retention engine."""

from datetime import datetime, timedelta

import pytest

from config import Settings
from vocab_srs.core.exceptions import InvalidRating
from vocab_srs.study.models import Rating, ReviewState
from vocab_srs.study.retention_engine import (
    MAX_DIFFICULTY,
    MAX_STABILITY,
    MIN_DIFFICULTY,
    MIN_STABILITY,
    FSRSScheduler,
    clamp,
    params_from_settings,
    round_half_up,
)


@pytest.fixture
def scheduler():
    return FSRSScheduler()


class TestDetermineRating:
    def test_wrong_answer_is_again_regardless_of_speed(self, scheduler):
        assert scheduler.determine_rating(False, 100) is Rating.AGAIN
        assert scheduler.determine_rating(False, 60000) is Rating.AGAIN

    @pytest.mark.parametrize(
        "elapsed_ms,expected",
        [
            (1000, Rating.EASY),
            (1999, Rating.EASY),
            (2000, Rating.GOOD),
            (3000, Rating.GOOD),
            (5000, Rating.HARD),
            (6000, Rating.HARD),
        ],
    )
    def test_correct_answer_graded_by_latency(self, scheduler, elapsed_ms, expected):
        assert scheduler.determine_rating(True, elapsed_ms) is expected

    def test_thresholds_come_from_params(self):
        scheduler = FSRSScheduler(params_from_settings(Settings(rating_easy_threshold_ms=500)))
        assert scheduler.determine_rating(True, 1000) is Rating.GOOD


class TestStabilityAndDifficulty:
    def test_hard_multiplies_stability(self, scheduler):
        assert scheduler.calculate_stability(10.0, 5.0, Rating.HARD) == pytest.approx(58.0)

    def test_new_item_stability_is_floored(self, scheduler):
        for rating in Rating:
            assert scheduler.calculate_stability(0.0, 5.0, rating) == MIN_STABILITY

    @pytest.mark.parametrize("rating", list(Rating))
    @pytest.mark.parametrize(
        "stability,difficulty",
        [(1e9, -5.0), (-100.0, 50.0), (0.0, 0.0), (36500.0, 10.0), (float("nan"), 5.0)],
    )
    def test_outputs_stay_within_clamps(self, scheduler, rating, stability, difficulty):
        s = scheduler.calculate_stability(stability, difficulty, rating)
        d = scheduler.calculate_difficulty(difficulty, rating)

        assert MIN_STABILITY <= s <= MAX_STABILITY
        assert MIN_DIFFICULTY <= d <= MAX_DIFFICULTY

    def test_difficulty_delta_per_rating(self, scheduler):
        assert scheduler.calculate_difficulty(5.0, Rating.AGAIN) == pytest.approx(6.49)
        assert scheduler.calculate_difficulty(5.0, Rating.HARD) == pytest.approx(5.14)
        assert scheduler.calculate_difficulty(5.0, Rating.GOOD) == pytest.approx(5.94)
        assert scheduler.calculate_difficulty(5.0, Rating.EASY) == pytest.approx(7.18)

    def test_difficulty_saturates_at_ten(self, scheduler):
        assert scheduler.calculate_difficulty(9.9, Rating.EASY) == MAX_DIFFICULTY

    def test_plain_int_rating_is_accepted(self, scheduler):
        assert scheduler.calculate_difficulty(5.0, 3) == pytest.approx(5.94)

    @pytest.mark.parametrize("bad", [0, 5, "3", None, 2.0])
    def test_invalid_rating_raises(self, scheduler, bad):
        with pytest.raises(InvalidRating):
            scheduler.calculate_difficulty(5.0, bad)


class TestCalculateNextReview:
    def test_first_review_schedules_tomorrow(self, scheduler, now):
        state = scheduler.calculate_next_review(ReviewState(), Rating.GOOD, 3000, now=now)

        assert state.stability == MIN_STABILITY
        assert state.difficulty == pytest.approx(5.94)
        assert state.scheduled_days == 1
        assert state.elapsed_days == 1
        assert state.reps == 1
        assert state.lapses == 0
        assert state.last_review == now
        assert state.next_review == now + timedelta(days=1)
        assert state.last_rating is Rating.GOOD
        assert state.response_time_ms == 3000

    def test_interval_follows_stability(self, scheduler, now):
        state = ReviewState(stability=10.0, difficulty=5.0, reps=3)
        new = scheduler.calculate_next_review(state, Rating.HARD, now=now)

        assert new.scheduled_days == 58
        assert new.next_review == now + timedelta(days=58)

    def test_again_counts_a_lapse(self, scheduler, now):
        state = ReviewState(stability=10.0, difficulty=5.0, reps=3, lapses=1)
        new = scheduler.calculate_next_review(state, Rating.AGAIN, now=now)

        assert new.lapses == 2
        assert new.reps == 4
        assert new.scheduled_days == 1

    def test_overdue_review_is_corrected(self, scheduler, now):
        state = ReviewState(stability=10.0, difficulty=5.0, elapsed_days=10, scheduled_days=5, reps=3)
        new = scheduler.calculate_next_review(state, Rating.HARD, now=now)

        assert new.scheduled_days == 16

    def test_interval_never_exceeds_maximum(self, now):
        params = params_from_settings(Settings(fsrs_maximum_interval=30))
        scheduler = FSRSScheduler(params)
        state = ReviewState(stability=10.0, difficulty=5.0, reps=3)

        assert scheduler.calculate_next_review(state, Rating.HARD, now=now).scheduled_days == 30

    def test_corrupt_counters_are_repaired(self, scheduler, now):
        state = ReviewState(stability=5.0, difficulty=5.0, reps=-3, lapses=9, elapsed_days=-2)
        new = scheduler.calculate_next_review(state, Rating.GOOD, now=now)

        assert new.reps == 1
        assert new.lapses == 0

    def test_review_rates_and_schedules(self, scheduler, now):
        new = scheduler.review(ReviewState(), True, 1200, now=now)
        assert new.last_rating is Rating.EASY


class TestRetention:
    def test_probability_at_stability_is_target(self, scheduler):
        assert scheduler.calculate_retention_probability(10.0, 10.0) == pytest.approx(0.9)

    def test_probability_is_non_increasing(self, scheduler):
        values = [scheduler.calculate_retention_probability(7.5, day) for day in range(0, 200)]
        assert all(a >= b for a, b in zip(values, values[1:]))
        assert values[0] == 1.0

    def test_zero_stability_means_forgotten(self, scheduler):
        assert scheduler.calculate_retention_probability(0.0, 3) == 0.0

    def test_optimal_interval(self, scheduler):
        assert scheduler.get_optimal_interval(10.0) == 10
        assert scheduler.get_optimal_interval(10.0, 0.8) == 21
        assert scheduler.get_optimal_interval(0.0) == 1


class TestWithElapsedDays:
    def test_measures_days_since_last_review(self, now):
        state = ReviewState(stability=4.0, elapsed_days=4, scheduled_days=4, last_review=now - timedelta(days=12))
        refreshed = FSRSScheduler.with_elapsed_days(state, now)

        assert refreshed.elapsed_days == 12
        assert state.elapsed_days == 4

    def test_never_reviewed_state_is_unchanged(self, now):
        state = ReviewState()
        assert FSRSScheduler.with_elapsed_days(state, now) is state


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.49) == 2


def test_clamp_handles_nan():
    assert clamp(float("nan"), 1.0, 10.0) == 1.0
    assert clamp(11.0, 1.0, 10.0) == 10.0


def test_now_defaults_to_current_time(scheduler):
    before = datetime.now()
    state = scheduler.calculate_next_review(ReviewState(), Rating.GOOD)
    assert state.last_review >= before
