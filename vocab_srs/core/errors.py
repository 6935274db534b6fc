"""
Scheduling engine exception taxonomy.

Each exception carries the HTTP status the API layer maps it to and
whether a client may retry the same request.
"""

from __future__ import annotations


class SchedulingError(Exception):
    """Base class for errors raised by the scheduling engine."""

    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ReviewValidationError(SchedulingError):
    """Raised when an input (quality, limit, item list) is malformed."""

    status_code = 422


class ReviewNotFoundError(SchedulingError):
    """Raised when a review id does not exist."""

    status_code = 404

    def __init__(self, review_id: int):
        super().__init__(f"Review {review_id} not found")
        self.review_id = review_id


class ReviewOwnershipError(SchedulingError):
    """Raised when a review belongs to a different user than the caller."""

    status_code = 403

    def __init__(self, review_id: int):
        super().__init__(f"Review {review_id} does not belong to the caller")
        self.review_id = review_id


class StorageError(SchedulingError):
    """
    Raised when a transaction fails or loses a concurrent update race.

    The transaction has been rolled back when this surfaces, so the caller
    may retry.
    """

    status_code = 503
    retryable = True
