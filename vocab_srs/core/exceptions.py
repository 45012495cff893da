"""
Error types raised by the scheduling core.

Numeric functions clamp out-of-range history instead of raising, so the
only errors here are programmer errors, collaborator failures and
conditions the caller must surface before a session starts.
"""

from __future__ import annotations


class VocabSrsError(Exception):
    """Base class for all scheduling core errors."""
    pass


class InvalidRating(VocabSrsError):
    """Raised when a memory model receives something that is not a Rating.

    Ratings are only produced by ``determine_rating``, so this always
    indicates a defect, never user input.
    """

    def __init__(self, rating: object):
        self.rating = rating
        super().__init__(f"Invalid FSRS rating: {rating!r}")


class RepositoryUnavailable(VocabSrsError):
    """Raised by repository adapters when the backing store cannot be reached."""
    pass


class InsufficientItems(VocabSrsError):
    """Raised before a session is created when too few items are saved."""

    def __init__(self, available: int, required: int):
        self.available = available
        self.required = required
        super().__init__(
            f"You need at least {required} saved words to start the exercise "
            f"(found {available})"
        )


class MalformedItem(VocabSrsError):
    """Raised when an item row has no usable term."""
    pass


class SessionCompleted(VocabSrsError):
    """Raised when an answer is submitted after the queue is exhausted."""
    pass
