"""
Quiz Session: state machine for one vocabulary practice run.

Flow:
    Idle -> Presenting(i) -> Evaluating -> Retire(i) | Requeue(i)
         -> Presenting(i+1) -> ... -> Completed

- A correct answer retires the item and marks its term mastered for
  this session.
- A wrong answer re-inserts the same item a few positions ahead.
- The session completes once the queue is walked and every term present
  at start has been answered correctly at least once.

Each answer also produces a new review state, handed to a review sink
(normally a ReviewWriter) without waiting for it. Sink failures are
logged and never affect queue progression.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Sequence

from loguru import logger

from vocab_srs.core.exceptions import SessionCompleted
from vocab_srs.study.models import Item, Rating, ReviewState, normalize_term
from vocab_srs.study.retention_engine import FSRSScheduler, round_half_up

ReviewSink = Callable[[str, ReviewState], None]


class SessionPhase(str, Enum):
    IDLE = "idle"
    PRESENTING = "presenting"
    COMPLETED = "completed"


@dataclass
class RequeueConfig:
    """How far ahead a missed item is re-inserted (inclusive range)."""

    min_offset: int = 2
    max_offset: int = 8

    def __post_init__(self):
        if self.min_offset < 1 or self.max_offset < self.min_offset:
            raise ValueError(
                f"Invalid requeue range [{self.min_offset}, {self.max_offset}]"
            )


@dataclass
class AnswerOutcome:
    """Result of submitting one answer."""

    item: Item
    is_correct: bool
    rating: Rating
    new_state: ReviewState
    newly_mastered: bool = False
    requeued_at: Optional[int] = None


@dataclass
class SessionResults:
    """End-of-session summary."""

    mastered_count: int
    correct_count: int
    total_attempts: int
    accuracy: float

    @property
    def accuracy_percent(self) -> int:
        return round_half_up(self.accuracy * 100)


class QuizSession:
    """
    One practice session over a fixed set of items.

    The session owns its queue exclusively; starting a new session means
    creating (or re-initializing) a QuizSession, never merging queues.
    """

    def __init__(
        self,
        scheduler: Optional[FSRSScheduler] = None,
        review_sink: Optional[ReviewSink] = None,
        requeue: Optional[RequeueConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.scheduler = scheduler or FSRSScheduler()
        self.review_sink = review_sink
        self.requeue = requeue or RequeueConfig()
        self.rng = rng or random.Random()

        self.queue: list[Item] = []
        self.index = 0
        self.mastered_terms: set[str] = set()
        self.correct_count = 0
        self.total_attempts = 0
        self.session_start_snapshot: frozenset[str] = frozenset()
        self._initialized = False
        # Latest proposed state per term, so repeat answers build on it
        self._proposed: dict[str, ReviewState] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, items: Sequence[Item]) -> None:
        """Start (or restart) the session with a fresh copy of items."""
        self.queue = list(items)
        self.index = 0
        self.mastered_terms = set()
        self.correct_count = 0
        self.total_attempts = 0
        self.session_start_snapshot = frozenset(item.normalized_term for item in self.queue)
        self._proposed = {}
        self._initialized = True

        logger.info(
            f"Quiz session started: {len(self.queue)} questions, "
            f"{len(self.session_start_snapshot)} distinct words"
        )

    @property
    def phase(self) -> SessionPhase:
        if not self._initialized:
            return SessionPhase.IDLE
        if self.is_complete():
            return SessionPhase.COMPLETED
        return SessionPhase.PRESENTING

    # ------------------------------------------------------------------
    # Question flow
    # ------------------------------------------------------------------

    def current_question(self) -> Optional[Item]:
        """The item to present, or None once the queue is walked."""
        if self.index < len(self.queue):
            return self.queue[self.index]
        return None

    def advance(self) -> Optional[Item]:
        """Move on after feedback; returns the next question, if any."""
        return self.current_question()

    def last_answered(self) -> Optional[Item]:
        """The item whose answer was just submitted."""
        if 0 < self.index <= len(self.queue):
            return self.queue[self.index - 1]
        return None

    def submit_answer(
        self,
        raw_input: str,
        elapsed_ms: int,
        now: Optional[datetime] = None,
    ) -> Optional[AnswerOutcome]:
        """
        Check an answer against the current item.

        Blank input is ignored and returns None without consuming the
        question.

        Raises:
            SessionCompleted: if there is no current question
        """
        item = self.current_question()
        if item is None:
            raise SessionCompleted("No question left to answer in this session")

        answer = normalize_term(raw_input or "")
        if not answer:
            return None

        term = item.normalized_term
        is_correct = answer == term
        self.total_attempts += 1

        rating = self.scheduler.determine_rating(is_correct, elapsed_ms)
        base_state = self._proposed.get(term) or item.review_state()
        base_state = self.scheduler.with_elapsed_days(base_state, now)
        new_state = self.scheduler.calculate_next_review(base_state, rating, elapsed_ms, now=now)
        self._proposed[term] = new_state
        self._dispatch_review(item.term, new_state)

        outcome = AnswerOutcome(item=item, is_correct=is_correct, rating=rating, new_state=new_state)

        if is_correct:
            outcome.newly_mastered = term not in self.mastered_terms
            self.mastered_terms.add(term)
            self.correct_count += 1
        else:
            offset = self.index + self.rng.randint(self.requeue.min_offset, self.requeue.max_offset)
            offset = min(offset, len(self.queue))
            self.queue.insert(offset, item)
            outcome.requeued_at = offset
            logger.debug(f"Missed '{item.term}', requeued at position {offset}")

        self.index += 1
        return outcome

    def _dispatch_review(self, term: str, state: ReviewState) -> None:
        if self.review_sink is None:
            return
        try:
            self.review_sink(term, state)
        except Exception:
            logger.exception(f"Review sink failed for '{term}'; continuing session")

    # ------------------------------------------------------------------
    # Completion and results
    # ------------------------------------------------------------------

    def is_exhausted(self) -> bool:
        """The cursor has walked past the last queued item."""
        return self.index >= len(self.queue)

    def is_complete(self) -> bool:
        """Queue walked and every starting term answered correctly once."""
        return self.is_exhausted() and self.session_start_snapshot <= self.mastered_terms

    def results(self) -> SessionResults:
        accuracy = self.correct_count / self.total_attempts if self.total_attempts > 0 else 0.0
        return SessionResults(
            mastered_count=len(self.mastered_terms),
            correct_count=self.correct_count,
            total_attempts=self.total_attempts,
            accuracy=accuracy,
        )

    def proposed_state(self, term: str) -> Optional[ReviewState]:
        """Latest review state proposed for term during this session."""
        return self._proposed.get(normalize_term(term))

    # ------------------------------------------------------------------
    # Edits during a session
    # ------------------------------------------------------------------

    def remove_term(self, term: str) -> int:
        """
        Drop every queued reference to a deleted term.

        The cursor steps back by the number of removed entries it had
        already passed, so the next question is unchanged.

        Returns:
            Number of queue entries removed
        """
        key = normalize_term(term)
        passed = sum(1 for item in self.queue[: self.index] if item.normalized_term == key)
        before = len(self.queue)
        self.queue = [item for item in self.queue if item.normalized_term != key]
        self.index = max(0, self.index - passed)
        self.mastered_terms.discard(key)
        self.session_start_snapshot = self.session_start_snapshot - {key}
        self._proposed.pop(key, None)
        return before - len(self.queue)

    def replace_item(self, item: Item) -> int:
        """Swap refreshed item data into every queued reference of its term."""
        key = item.normalized_term
        replaced = 0
        for position, queued in enumerate(self.queue):
            if queued.normalized_term == key:
                self.queue[position] = item
                replaced += 1
        return replaced
