"""
Storage adapters for saved words.

The scheduling core only talks to VocabularyRepository; the adapters
here are the concrete stores used by tests and the terminal commands.
"""

from vocab_srs.storage.json_repository import JsonFileRepository
from vocab_srs.storage.repository import InMemoryRepository, sort_by_due
from vocab_srs.study.ports import SESSION_SIZE_KEY, VocabularyRepository

__all__ = [
    "VocabularyRepository",
    "InMemoryRepository",
    "JsonFileRepository",
    "SESSION_SIZE_KEY",
    "sort_by_due",
]
