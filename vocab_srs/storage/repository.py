"""In-memory storage adapter and shared repository helpers."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional, Union

from loguru import logger

from vocab_srs.core.exceptions import RepositoryUnavailable
from vocab_srs.study.due_classifier import is_due
from vocab_srs.study.models import Item, ReviewState, normalize_term
from vocab_srs.study.ports import VocabularyRepository


def sort_by_due(items: Iterable[Item]) -> list[Item]:
    """Sort items earliest-due first, never-scheduled items ahead of all."""
    return sorted(
        items,
        key=lambda item: (item.next_review is not None, item.next_review or datetime.min),
    )


class InMemoryRepository(VocabularyRepository):
    """Keeps items and preferences in process memory."""

    def __init__(
        self,
        items: Iterable[Union[Item, dict]] = (),
        preferences: Optional[dict[str, str]] = None,
    ):
        self._items: dict[str, Item] = {}
        self._preferences: dict[str, str] = dict(preferences or {})
        self.available = True
        self.review_log: list[tuple[str, ReviewState]] = []
        for item in items:
            self.add_item(item if isinstance(item, Item) else Item.from_dict(item))

    def add_item(self, item: Item) -> None:
        """Insert or replace an item (keyed case-insensitively)."""
        self._items[item.normalized_term] = item

    def delete_item(self, term: str) -> bool:
        return self._items.pop(normalize_term(term), None) is not None

    def get_item(self, term: str) -> Optional[Item]:
        item = self._items.get(normalize_term(term))
        return replace(item) if item else None

    def _check_available(self) -> None:
        if not self.available:
            raise RepositoryUnavailable("In-memory repository marked unavailable")

    async def fetch_all_items(self) -> list[Item]:
        self._check_available()
        return [replace(item) for item in self._items.values()]

    async def fetch_due_items(self, now: Optional[datetime] = None) -> list[Item]:
        self._check_available()
        now = now or datetime.now()
        due = [replace(item) for item in self._items.values() if is_due(item.status_state(), now)]
        return sort_by_due(due)

    async def record_review(self, term: str, state: ReviewState) -> bool:
        self._check_available()
        key = normalize_term(term)
        item = self._items.get(key)
        if item is None:
            logger.warning(f"Word not found for review update: '{term}'")
            return False
        self._items[key] = replace(item, review=state)
        self.review_log.append((term, state))
        return True

    def read_preference(self, key: str) -> Optional[str]:
        return self._preferences.get(key)

    def write_preference(self, key: str, value: str) -> None:
        self._preferences[key] = str(value)
