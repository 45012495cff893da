"""
Session Builder for vocabulary practice.

Composes a bounded practice session:
- Due words first (earliest due first, as supplied by the repository)
- Random filler words when fewer than session_size are due
- Two-half shuffle: the first half keeps the due words ahead of the
  filler while presentation order inside each half is randomized
"""
from __future__ import annotations

import math
import random
from typing import Optional, Sequence

from loguru import logger

from vocab_srs.study.models import Item, SessionComposition

DEFAULT_SESSION_SIZE = 25
SESSION_SIZE_CHOICES = (25, 50)


def select_session_words(
    all_items: Sequence[Item],
    due_items: Sequence[Item],
    session_size: int,
    rng: Optional[random.Random] = None,
) -> list[Item]:
    """
    Select and order the items for one session.

    Args:
        all_items: Every saved item
        due_items: Items due for review, earliest due first
        session_size: Maximum number of items in the session
        rng: Randomness source (module-level random if None)

    Returns:
        At most session_size items with distinct terms (case-insensitive)
    """
    rng = rng or random.Random()
    if session_size <= 0:
        return []

    selected: list[Item] = []
    seen: set[str] = set()

    # 1. Due items up to the session size, in supplied order
    for item in due_items:
        if len(selected) >= session_size:
            break
        key = item.normalized_term
        if key in seen:
            continue
        selected.append(item)
        seen.add(key)

    # 2. Fill with random unselected items
    if len(selected) < session_size and len(all_items) > len(selected):
        available = _distinct(item for item in all_items if item.normalized_term not in seen)
        remaining = session_size - len(selected)
        filler = rng.sample(available, min(remaining, len(available)))
        selected.extend(filler)
        seen.update(item.normalized_term for item in filler)

    # 3. Nothing due and nothing filled: plain random selection
    if not selected and all_items:
        available = _distinct(all_items)
        selected = rng.sample(available, min(session_size, len(available)))

    # 4. Limit to session size
    selected = selected[:session_size]

    # 5. Shuffle each half independently
    midpoint = math.ceil(len(selected) / 2)
    priority = selected[:midpoint]
    others = selected[midpoint:]
    rng.shuffle(priority)
    rng.shuffle(others)

    return priority + others


def compose_session(
    all_items: Sequence[Item],
    due_items: Sequence[Item],
    session_size: int,
    rng: Optional[random.Random] = None,
) -> SessionComposition:
    """
    Drop items without a usable term, then select the session.

    The number of dropped items is reported on the result rather than raised.
    """
    valid_all = [item for item in all_items if has_term(item)]
    valid_due = [item for item in due_items if has_term(item)]
    skipped = (len(all_items) - len(valid_all)) + _count_extra_malformed(all_items, due_items)

    if skipped:
        logger.warning(f"Skipped {skipped} malformed item(s) while composing session")

    items = select_session_words(valid_all, valid_due, session_size, rng=rng)

    due_terms = {item.normalized_term for item in valid_due}
    due_count = sum(1 for item in items if item.normalized_term in due_terms)
    logger.info(
        f"Session composed: {due_count} due + {len(items) - due_count} filler "
        f"= {len(items)} words (size {session_size})"
    )

    return SessionComposition(items=items, skipped_malformed=skipped)


def validate_session_size(size: int, choices: Sequence[int] = SESSION_SIZE_CHOICES) -> int:
    """Return size if it is an allowed session size, else raise ValueError."""
    if size not in choices:
        allowed = ", ".join(str(c) for c in choices)
        raise ValueError(f"Session size must be one of: {allowed} (got {size})")
    return size


def has_term(item: Item) -> bool:
    return isinstance(item.term, str) and bool(item.term.strip())


def _distinct(items) -> list[Item]:
    """Keep the first item per normalized term."""
    result: list[Item] = []
    seen: set[str] = set()
    for item in items:
        key = item.normalized_term
        if key not in seen:
            result.append(item)
            seen.add(key)
    return result


def _count_extra_malformed(all_items: Sequence[Item], due_items: Sequence[Item]) -> int:
    """Malformed due items that are not also present in all_items."""
    known = {id(item) for item in all_items}
    return sum(1 for item in due_items if not has_term(item) and id(item) not in known)
