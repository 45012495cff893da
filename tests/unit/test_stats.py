"""Tests for collection statistics."""

from datetime import timedelta

import pytest

from vocab_srs.study.due_classifier import classify
from vocab_srs.study.models import Item, LegacyReviewState, ReviewState
from vocab_srs.study.stats import collection_summary, stability_distribution, status_breakdown


@pytest.fixture
def collection(now):
    return [
        Item(term="fresh"),
        Item(
            term="shaky",
            review=ReviewState(stability=3.0, reps=2, lapses=1, next_review=now - timedelta(days=1)),
        ),
        Item(
            term="solid",
            review=ReviewState(stability=30.0, reps=5, next_review=now + timedelta(days=30)),
        ),
    ]


def test_empty_collection(now):
    summary = collection_summary([], now)

    assert summary.total_words == 0
    assert summary.accuracy_rate == 0.0
    assert summary.status_breakdown == {"new": 0, "learning": 0, "mastered": 0, "overdue": 0}


def test_collection_summary(collection, now):
    summary = collection_summary(collection, now)

    assert summary.total_words == 3
    assert summary.new_words == 1
    assert summary.learning_words == 1
    assert summary.mastered_words == 1
    assert summary.due_words == 2
    assert summary.average_stability == pytest.approx(11.0)
    assert summary.average_difficulty == pytest.approx(5.0)
    assert summary.total_reviews == 7
    assert summary.total_lapses == 1
    assert summary.accuracy_rate == pytest.approx(85.7)


def test_status_breakdown(collection, now):
    assert status_breakdown(collection, now) == {
        "new": 1,
        "learning": 0,
        "mastered": 1,
        "overdue": 1,
    }


def test_stability_distribution(collection):
    buckets = stability_distribution(collection + [Item(term="ancient", review=ReviewState(stability=400.0, reps=9))])

    assert len(buckets) == 10
    assert buckets[0].range_label == "0-10"
    assert buckets[0].count == 1
    assert buckets[3].count == 1
    assert buckets[9].count == 1
    assert buckets[9].percentage == pytest.approx(25.0)
    assert sum(b.count for b in buckets) == 3


def test_reporting_does_not_change_classification(now):
    item = Item(
        term="drifting",
        legacy=LegacyReviewState(interval=25, reps=2, correct=2, next_review=now + timedelta(days=5)),
    )
    before = classify(item.status_state(), now)

    summary = collection_summary([item], now)
    stability_distribution([item])

    assert classify(item.status_state(), now) is before
    assert item.review is None
    assert summary.status_breakdown[before.value] == 1
    assert summary.average_stability == pytest.approx(22.5)
