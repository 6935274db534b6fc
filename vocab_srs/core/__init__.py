"""
Core Module - Shared primitives used across the scheduling engine.

Components:
- clock: Wall-clock time and calendar-day boundaries (Clock, FixedClock)
- errors: Domain exception taxonomy (SchedulingError and subclasses)
- log_setup: loguru sink configuration
"""

from vocab_srs.core.clock import Clock, FixedClock, calendar_days_between
from vocab_srs.core.errors import (
    ReviewNotFoundError,
    ReviewOwnershipError,
    ReviewValidationError,
    SchedulingError,
    StorageError,
)

__all__ = [
    # Clock
    "Clock",
    "FixedClock",
    "calendar_days_between",
    # Errors
    "SchedulingError",
    "ReviewValidationError",
    "ReviewNotFoundError",
    "ReviewOwnershipError",
    "StorageError",
]
