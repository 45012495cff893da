"""
Study modules for vocabulary practice.

Provides:
- Memory models (FSRS-style and legacy ease-factor) and migration
- Due-date classification and badges
- Session composition and the quiz session state machine
- Progress counters and collection statistics
"""

from vocab_srs.study.due_classifier import DueBadge, classify, due_badge, is_due
from vocab_srs.study.legacy_scheduler import LegacyScheduler, convert_legacy_to_rich, update_legacy
from vocab_srs.study.models import (
    Item,
    ItemStatus,
    LegacyReviewState,
    Rating,
    ReviewState,
    SessionComposition,
)
from vocab_srs.study.progress import ProgressTracker
from vocab_srs.study.quiz_session import QuizSession, RequeueConfig, SessionResults
from vocab_srs.study.retention_engine import FSRSScheduler
from vocab_srs.study.review_writer import ReviewWriter
from vocab_srs.study.session_builder import compose_session, select_session_words
from vocab_srs.study.study_service import StudyService

__all__ = [
    "Item",
    "ItemStatus",
    "LegacyReviewState",
    "Rating",
    "ReviewState",
    "SessionComposition",
    "FSRSScheduler",
    "LegacyScheduler",
    "update_legacy",
    "convert_legacy_to_rich",
    "DueBadge",
    "classify",
    "due_badge",
    "is_due",
    "select_session_words",
    "compose_session",
    "QuizSession",
    "RequeueConfig",
    "SessionResults",
    "ProgressTracker",
    "ReviewWriter",
    "StudyService",
]
