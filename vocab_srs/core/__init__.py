"""
Core infrastructure shared by the study modules.

- Exceptions raised across the scheduling core
- Loguru sink configuration
"""

from vocab_srs.core.exceptions import (
    InsufficientItems,
    InvalidRating,
    MalformedItem,
    RepositoryUnavailable,
    SessionCompleted,
    VocabSrsError,
)
from vocab_srs.core.log_setup import configure_logging

__all__ = [
    "VocabSrsError",
    "InvalidRating",
    "RepositoryUnavailable",
    "InsufficientItems",
    "MalformedItem",
    "SessionCompleted",
    "configure_logging",
]
