"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from vocab_srs.storage.repository import InMemoryRepository  # noqa: E402
from vocab_srs.study.models import Item, ReviewState  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (full session flow)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """Fixed review time so due-date math is deterministic."""
    return datetime(2024, 3, 15, 12, 0, 0)


@pytest.fixture
def rng():
    """Seeded randomness source."""
    return random.Random(1234)


@pytest.fixture
def sample_words():
    """Ten plain words with no review history."""
    return [
        Item(term=term, definition=f"definition of {term}", example=f"A sentence with {term}.")
        for term in (
            "abate", "benign", "candid", "deference", "eloquent",
            "fervent", "gregarious", "haughty", "impetus", "jovial",
        )
    ]


@pytest.fixture
def make_item():
    """Factory for items with a rich review state."""

    def _make(term, next_review=None, stability=0.0, reps=0, **state):
        review = ReviewState(stability=stability, reps=reps, next_review=next_review, **state)
        return Item(term=term, definition=f"definition of {term}", review=review)

    return _make


@pytest.fixture
def repository(sample_words):
    """In-memory repository seeded with sample_words."""
    return InMemoryRepository(sample_words)
