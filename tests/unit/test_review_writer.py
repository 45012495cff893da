from unittest.mock import AsyncMock

import pytest

from vocab_srs.core.exceptions import RepositoryUnavailable
from vocab_srs.storage.repository import InMemoryRepository
from vocab_srs.study.models import Item, ReviewState
from vocab_srs.study.review_writer import ReviewWriter


@pytest.fixture
def state(now):
    return ReviewState(stability=2.0, reps=1, last_review=now, next_review=now)


@pytest.mark.asyncio
async def test_submit_persists_in_background(state):
    repository = InMemoryRepository([Item(term="abate")])
    writer = ReviewWriter(repository)

    task = writer.submit("abate", state)
    assert task is not None

    await writer.drain()

    assert writer.written == 1
    assert writer.pending_count == 0
    assert repository.review_log == [("abate", state)]
    assert repository.get_item("abate").review == state


@pytest.mark.asyncio
async def test_unknown_term_counts_as_failure(state):
    writer = ReviewWriter(InMemoryRepository())

    writer("ghost", state)
    await writer.drain()

    assert writer.written == 0
    assert writer.failed == 1


@pytest.mark.asyncio
async def test_unavailable_repository_is_logged_not_raised(state):
    repository = InMemoryRepository([Item(term="abate")])
    repository.available = False
    writer = ReviewWriter(repository)

    writer("abate", state)
    await writer.drain()

    assert writer.failed == 1
    assert repository.review_log == []


@pytest.mark.asyncio
async def test_unexpected_error_is_contained(state):
    repository = AsyncMock()
    repository.record_review.side_effect = RuntimeError("connection reset")
    writer = ReviewWriter(repository)

    writer("abate", state)
    await writer.drain()

    assert writer.failed == 1
    repository.record_review.assert_awaited_once_with("abate", state)


@pytest.mark.asyncio
async def test_submit_does_not_wait_for_write(state):
    repository = AsyncMock()
    repository.record_review.return_value = True
    writer = ReviewWriter(repository)

    writer.submit("abate", state)

    assert writer.pending_count == 1
    assert writer.written == 0
    await writer.drain()
    assert writer.written == 1


def test_without_event_loop_the_write_is_dropped(state):
    writer = ReviewWriter(InMemoryRepository([Item(term="abate")]))

    assert writer.submit("abate", state) is None
    assert writer.failed == 1


@pytest.mark.asyncio
async def test_availability_checked_when_task_runs(state):
    repository = InMemoryRepository([Item(term="abate")])
    writer = ReviewWriter(repository)

    writer("abate", state)
    repository.available = False
    await writer.drain()

    with pytest.raises(RepositoryUnavailable):
        await repository.fetch_all_items()
    assert writer.failed == 1
