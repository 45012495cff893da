"""Tests for the JSON file word store."""

import json
from datetime import timedelta

import pytest

from vocab_srs.core.exceptions import RepositoryUnavailable
from vocab_srs.storage.json_repository import JsonFileRepository
from vocab_srs.study.models import ReviewState
from vocab_srs.study.ports import SESSION_SIZE_KEY


@pytest.fixture
def words_file(tmp_path):
    path = tmp_path / "words.json"
    path.write_text(
        json.dumps(
            {
                "items": [
                    {"term": "abate", "definition": "to lessen", "example": "The storm abated."},
                    {"word": "benign", "interval": 6, "ease_factor": 2.1, "review_count": 4, "correct_count": 3},
                    {"term": "", "definition": "orphan row"},
                    {"definition": "no term at all"},
                ],
                "preferences": {"session_size": 50},
            }
        ),
        encoding="utf-8",
    )
    return path


def test_missing_file_starts_empty(tmp_path):
    repository = JsonFileRepository(tmp_path / "nope" / "words.json")
    assert repository.skipped_rows == 0
    assert repository.get_item("abate") is None


@pytest.mark.asyncio
async def test_load_skips_malformed_rows(words_file):
    repository = JsonFileRepository(words_file)

    items = await repository.fetch_all_items()

    assert sorted(item.term for item in items) == ["abate", "benign"]
    assert repository.skipped_rows == 2
    assert repository.get_item("benign").legacy.interval == 6
    assert repository.read_preference(SESSION_SIZE_KEY) == "50"


def test_plain_list_file(tmp_path):
    path = tmp_path / "words.json"
    path.write_text(json.dumps([{"term": "candid"}]), encoding="utf-8")

    assert JsonFileRepository(path).get_item("CANDID") is not None


def test_corrupt_file_is_unavailable(tmp_path):
    path = tmp_path / "words.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(RepositoryUnavailable):
        JsonFileRepository(path)


@pytest.mark.asyncio
async def test_record_review_is_saved(words_file, now):
    repository = JsonFileRepository(words_file)
    state = ReviewState(stability=3.5, difficulty=6.0, reps=5, lapses=1, last_review=now, next_review=now + timedelta(days=4))

    assert await repository.record_review("Benign", state)

    reloaded = JsonFileRepository(words_file)
    stored = reloaded.get_item("benign")
    assert stored.review == state
    assert stored.legacy is None


@pytest.mark.asyncio
async def test_record_review_unknown_term(words_file):
    repository = JsonFileRepository(words_file)
    assert not await repository.record_review("ghost", ReviewState())


def test_preferences_are_saved(tmp_path):
    path = tmp_path / "store" / "words.json"
    repository = JsonFileRepository(path)

    repository.write_preference(SESSION_SIZE_KEY, "25")

    assert JsonFileRepository(path).read_preference(SESSION_SIZE_KEY) == "25"


@pytest.mark.asyncio
async def test_due_items_ordered_earliest_first(tmp_path, now):
    path = tmp_path / "words.json"
    rows = [
        {"term": "late", "stability": 2.0, "reps": 1, "next_review": (now - timedelta(days=1)).isoformat()},
        {"term": "later", "stability": 2.0, "reps": 1, "next_review": (now + timedelta(days=3)).isoformat()},
        {"term": "fresh"},
        {"term": "oldest", "stability": 2.0, "reps": 1, "next_review": (now - timedelta(days=9)).isoformat()},
    ]
    path.write_text(json.dumps({"items": rows}), encoding="utf-8")

    due = await JsonFileRepository(path).fetch_due_items(now)

    assert [item.term for item in due] == ["fresh", "oldest", "late"]


def test_non_object_rows_are_skipped(tmp_path):
    path = tmp_path / "words.json"
    path.write_text(json.dumps({"items": ["loose string", 42, None, {"term": "candid"}]}), encoding="utf-8")

    repository = JsonFileRepository(path)

    assert repository.skipped_rows == 3
    assert repository.get_item("candid") is not None


def test_unreadable_timestamps(tmp_path):
    path = tmp_path / "words.json"
    rows = [
        {"term": "exported", "stability": 2.0, "reps": 1, "next_review": "2024-03-15T12:00:00.12Z"},
        {"term": "garbled", "stability": 2.0, "reps": 1, "next_review": "next tuesday"},
    ]
    path.write_text(json.dumps({"items": rows}), encoding="utf-8")

    repository = JsonFileRepository(path)

    assert repository.skipped_rows == 1
    assert repository.get_item("garbled") is None
    assert repository.get_item("exported").review.next_review is not None
