"""
JSON file storage for terminal practice.

Words and preferences live in one JSON file (default
~/.vocab_srs/words.json):

    {
      "items": [{"term": "hello", "definition": "...", "example": "...", ...}],
      "preferences": {"session_size": "25"}
    }

Rows without a term are skipped on load and counted in ``skipped_rows``.
"""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger

from vocab_srs.core.exceptions import MalformedItem, RepositoryUnavailable
from vocab_srs.storage.repository import InMemoryRepository
from vocab_srs.study.models import Item, ReviewState


class JsonFileRepository(InMemoryRepository):
    """InMemoryRepository that loads from and saves to a JSON file."""

    def __init__(self, path: Path | str):
        super().__init__()
        self.path = Path(path).expanduser()
        self.skipped_rows = 0
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.debug(f"No word file at {self.path}; starting empty")
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise RepositoryUnavailable(f"Cannot read {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise RepositoryUnavailable(f"Corrupted word file {self.path}: {e}") from e

        rows = data.get("items", []) if isinstance(data, dict) else data
        for row in rows:
            if not isinstance(row, dict):
                self.skipped_rows += 1
                logger.warning(f"Skipping malformed row: {row!r}")
                continue
            try:
                self.add_item(Item.from_dict(row))
            except MalformedItem as e:
                self.skipped_rows += 1
                logger.warning(f"Skipping malformed row: {e}")

        if isinstance(data, dict):
            self._preferences.update(
                {str(k): str(v) for k, v in (data.get("preferences") or {}).items()}
            )

        logger.debug(
            f"Loaded {len(self._items)} words from {self.path} ({self.skipped_rows} skipped)"
        )

    def save(self) -> Path:
        """Write all items and preferences back to disk."""
        payload = {
            "items": [item.to_dict() for item in self._items.values()],
            "preferences": self._preferences,
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise RepositoryUnavailable(f"Cannot write {self.path}: {e}") from e
        return self.path

    async def record_review(self, term: str, state: ReviewState) -> bool:
        stored = await super().record_review(term, state)
        if stored:
            self.save()
        return stored

    def write_preference(self, key: str, value: str) -> None:
        super().write_preference(key, value)
        self.save()
