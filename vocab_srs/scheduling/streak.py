"""
Daily streak tracking on local calendar days.

A streak counts consecutive calendar days with at least one correct answer.
``advance`` is applied when a correct answer is recorded; ``observe`` is the
read-only view used by stats, which reports a broken streak as 0 before the
stored counter is lazily reset by the next correct answer.
"""

from __future__ import annotations

from datetime import datetime

from vocab_srs.core.clock import calendar_days_between


def advance(last_activity_at: datetime | None, current_streak: int, now: datetime) -> int:
    """Streak after a correct answer at ``now``."""
    if last_activity_at is None:
        return 1

    gap = calendar_days_between(last_activity_at, now)
    if gap <= 0:
        # Already counted today (or clock skew); a correct answer today means at least 1
        return max(current_streak, 1)
    if gap == 1:
        return current_streak + 1
    return 1


def observe(last_activity_at: datetime | None, current_streak: int, now: datetime) -> int:
    """Streak as it should be displayed at ``now``. Never writes."""
    if last_activity_at is None:
        return 0
    if calendar_days_between(last_activity_at, now) > 1:
        return 0
    return current_streak


def next_longest(new_streak: int, longest_streak: int) -> int:
    return max(new_streak, longest_streak)
