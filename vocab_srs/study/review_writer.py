"""
Detached, best-effort persistence of review outcomes.

QuizSession hands each new review state to a ReviewWriter and moves on.
The writer schedules ``repository.record_review`` as a task on the
running event loop and only logs the outcome; nothing here ever raises
back into the session. Retrying is left to the host.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from loguru import logger

from vocab_srs.core.exceptions import RepositoryUnavailable
from vocab_srs.study.models import ReviewState
from vocab_srs.study.ports import VocabularyRepository


class ReviewWriter:
    """Fire-and-forget review sink backed by a repository."""

    def __init__(self, repository: VocabularyRepository):
        self.repository = repository
        self.written = 0
        self.failed = 0
        # Strong references so pending tasks are not garbage collected
        self._pending: set[asyncio.Task] = set()

    def __call__(self, term: str, state: ReviewState) -> None:
        self.submit(term, state)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def submit(self, term: str, state: ReviewState) -> Optional[asyncio.Task]:
        """Schedule a write without waiting for it."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.failed += 1
            logger.warning(f"No running event loop; review for '{term}' was not saved")
            return None

        task = loop.create_task(self._write(term, state), name=f"record-review:{term}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _write(self, term: str, state: ReviewState) -> bool:
        try:
            stored = await self.repository.record_review(term, state)
        except RepositoryUnavailable as e:
            self.failed += 1
            logger.warning(f"Review for '{term}' not saved, repository unavailable: {e}")
            return False
        except Exception as e:
            self.failed += 1
            logger.error(f"Failed to record review for '{term}': {e}")
            return False

        if stored:
            self.written += 1
            logger.debug(
                f"Recorded review for '{term}': next_review={state.next_review}, "
                f"interval={state.scheduled_days}d"
            )
        else:
            self.failed += 1
            logger.warning(f"Review for '{term}' was rejected by the repository")
        return stored

    async def drain(self) -> None:
        """Wait for every pending write to finish (tests, shutdown)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
