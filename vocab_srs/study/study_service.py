"""
Study Service for vocabulary practice.

Provides high-level operations for the presentation layer:
- Build a session (due + filler words, bounded by the session size)
- Start a QuizSession wired to detached review persistence
- Read and write the session-size preference
- Keep a short-lived read-through cache of (all words, due words)
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from config import Settings, get_settings
from vocab_srs.core.exceptions import InsufficientItems
from vocab_srs.study.models import Item, ReviewState, SessionComposition
from vocab_srs.study.ports import SESSION_SIZE_KEY, VocabularyRepository
from vocab_srs.study.quiz_session import QuizSession, RequeueConfig
from vocab_srs.study.retention_engine import FSRSScheduler, params_from_settings
from vocab_srs.study.review_writer import ReviewWriter
from vocab_srs.study.session_builder import compose_session, has_term, validate_session_size


@dataclass
class ExerciseData:
    """Snapshot of the repository used to compose sessions."""

    all_items: list[Item] = field(default_factory=list)
    due_items: list[Item] = field(default_factory=list)


class ExerciseDataCache:
    """
    Read-through cache for exercise data.

    The cached snapshot is only ever replaced as a whole, never patched.
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._data: Optional[ExerciseData] = None
        self._stored_at: Optional[float] = None

    def is_valid(self) -> bool:
        return (
            self._data is not None
            and self._stored_at is not None
            and (self._clock() - self._stored_at) < self.ttl_seconds
        )

    def get(self) -> Optional[ExerciseData]:
        return self._data if self.is_valid() else None

    def update(self, data: ExerciseData) -> None:
        self._data = data
        self._stored_at = self._clock()

    def invalidate(self) -> None:
        self._data = None
        self._stored_at = None


class StudyService:
    """
    High-level service for practice sessions.

    Coordinates between the repository, session builder and quiz session.
    """

    def __init__(
        self,
        repository: VocabularyRepository,
        settings: Optional[Settings] = None,
        scheduler: Optional[FSRSScheduler] = None,
        rng: Optional[random.Random] = None,
        cache: Optional[ExerciseDataCache] = None,
    ):
        """
        Initialize study service.

        Args:
            repository: Word store collaborator
            settings: Application settings (cached settings if None)
            scheduler: Memory model (built from settings if None)
            rng: Randomness source for composition and requeueing
            cache: Exercise data cache (TTL from settings if None)
        """
        self.repository = repository
        self.settings = settings or get_settings()
        self.scheduler = scheduler or FSRSScheduler(params_from_settings(self.settings))
        self.rng = rng or random.Random()
        self.cache = cache or ExerciseDataCache(self.settings.exercise_cache_ttl_seconds)
        self.review_writer = ReviewWriter(repository)

    # ------------------------------------------------------------------
    # Session size preference
    # ------------------------------------------------------------------

    def get_session_size(self) -> int:
        """Saved session size, or the default when unset or invalid."""
        default = self.settings.session_size_default
        saved = self.repository.read_preference(SESSION_SIZE_KEY)
        if saved is None:
            return default
        try:
            return validate_session_size(int(saved), self.settings.session_size_choices)
        except ValueError:
            logger.warning(f"Ignoring invalid saved session size {saved!r}; using {default}")
            return default

    def set_session_size(self, size: int) -> None:
        validate_session_size(size, self.settings.session_size_choices)
        self.repository.write_preference(SESSION_SIZE_KEY, str(size))

    # ------------------------------------------------------------------
    # Exercise data
    # ------------------------------------------------------------------

    async def load_exercise_data(self, now: Optional[datetime] = None) -> ExerciseData:
        """Return cached (all, due) items, fetching both when the cache is stale."""
        cached = self.cache.get()
        if cached is not None:
            return cached

        all_items, due_items = await asyncio.gather(
            self.repository.fetch_all_items(),
            self.repository.fetch_due_items(now),
        )
        data = ExerciseData(all_items=list(all_items), due_items=list(due_items))
        self.cache.update(data)
        logger.debug(f"Fetched {len(data.all_items)} words ({len(data.due_items)} due)")
        return data

    async def prefetch(self) -> None:
        """Warm the cache; failures are logged, not raised."""
        try:
            await self.load_exercise_data()
        except Exception as e:
            logger.error(f"Failed to pre-fetch exercise data: {e}")

    def refresh(self) -> None:
        """Drop cached data so the next session refetches."""
        self.cache.invalidate()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def build_session(
        self,
        session_size: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> SessionComposition:
        """
        Compose the items for a new session.

        Raises:
            InsufficientItems: if fewer than the configured minimum of
                usable (non-blank) words are saved
        """
        size = session_size if session_size is not None else self.get_session_size()
        data = await self.load_exercise_data(now)

        required = self.settings.session_min_items
        available = sum(1 for item in data.all_items if has_term(item))
        if available < required:
            raise InsufficientItems(available=available, required=required)

        return compose_session(data.all_items, data.due_items, size, rng=self.rng)

    def record_review(self, term: str, state: ReviewState) -> None:
        """Review sink: cached snapshots are stale once a review is written."""
        self.cache.invalidate()
        self.review_writer(term, state)

    def new_quiz_session(self) -> QuizSession:
        """Create an idle QuizSession that writes reviews through this service."""
        return QuizSession(
            scheduler=self.scheduler,
            review_sink=self.record_review,
            requeue=RequeueConfig(
                min_offset=self.settings.requeue_min_offset,
                max_offset=self.settings.requeue_max_offset,
            ),
            rng=self.rng,
        )

    async def start_session(
        self,
        session_size: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> QuizSession:
        """Build a session and return an initialized QuizSession for it."""
        # Earlier sessions' writes must land before their words are reloaded
        await self.review_writer.drain()
        composition = await self.build_session(session_size, now=now)
        if composition.skipped_malformed:
            logger.warning(f"{composition.skipped_malformed} word(s) skipped (missing term)")

        session = self.new_quiz_session()
        session.initialize(composition.items)
        return session
