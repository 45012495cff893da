"""
Ports (interfaces) for item storage.

These define the contract that storage adapters must implement. Study
services depend on this abstraction, not on a concrete store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from vocab_srs.study.models import Item, ReviewState

SESSION_SIZE_KEY = "session_size"


class VocabularyRepository(ABC):
    """
    Port for reading saved words and writing review outcomes.

    Implementations:
        - InMemoryRepository: process-local store (tests, embedding hosts)
        - JsonFileRepository: single JSON file (terminal practice)
    """

    @abstractmethod
    async def fetch_all_items(self) -> list[Item]:
        """Return every saved item."""
        pass

    @abstractmethod
    async def fetch_due_items(self, now: Optional[datetime] = None) -> list[Item]:
        """
        Return items due at ``now``.

        Ordered ascending by next review; items without one come first.
        """
        pass

    @abstractmethod
    async def record_review(self, term: str, state: ReviewState) -> bool:
        """
        Persist a new review state for term.

        Returns:
            True if stored, False if the term is unknown.

        Raises:
            RepositoryUnavailable: if the store cannot be reached.
        """
        pass

    @abstractmethod
    def read_preference(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def write_preference(self, key: str, value: str) -> None:
        pass
