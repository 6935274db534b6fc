"""
Daily session composition.

Builds "today's session" from three candidate sets and the counters shown
before a session starts:

1. Due reviews: pool of 2x the limit, easiest first, shuffled, truncated
2. Learning items: always surfaced, not capped
3. New items: fill the daily new-item ceiling left after today's starts
   and the current learning set

Lists and counters go through the same ReviewStore predicates and the same
budget computation, so the counts a learner sees match the items handed out.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger
from sqlalchemy.orm import Session

from vocab_srs.core.clock import Clock
from vocab_srs.core.errors import ReviewValidationError
from vocab_srs.core.study_item import StudyItem
from vocab_srs.db.content_store import ContentStore
from vocab_srs.db.review_store import ReviewStore
from vocab_srs.scheduling import streak

POOL_FACTOR = 2  # Candidate pool size relative to the number of items returned


@dataclass
class NewItemBudget:
    """How many brand-new items may still be introduced today."""

    daily_limit: int
    started_today: int
    learning_count: int

    @property
    def remaining_today(self) -> int:
        return max(0, self.daily_limit - self.started_today)

    @property
    def remaining_slots(self) -> int:
        # Learning items count against the same ceiling as new ones
        return max(0, min(self.remaining_today, self.daily_limit - self.learning_count))


@dataclass
class TodaySession:
    """A composed study session."""

    due_reviews: list[StudyItem] = field(default_factory=list)
    new_items: list[StudyItem] = field(default_factory=list)  # learning + new
    learned_today_items: list[StudyItem] = field(default_factory=list)

    @property
    def total_due(self) -> int:
        return len(self.due_reviews)

    @property
    def total_new(self) -> int:
        return len(self.new_items)

    @property
    def total_learned_today(self) -> int:
        return len(self.learned_today_items)


@dataclass
class SessionStats:
    """Counters shown on the dashboard before a session starts."""

    total_xp: int
    current_streak: int
    longest_streak: int
    last_activity_at: datetime | None
    due_count: int
    new_items_count: int
    learned_today_count: int
    total_new_available: int


class SessionComposer:
    """
    Read-only orchestration over ReviewStore and ContentStore.

    The shuffle uses an injected ``random.Random`` so sessions are
    reproducible under a fixed seed.
    """

    def __init__(self, session: Session, clock: Clock, rng: random.Random | None = None):
        self.reviews = ReviewStore(session)
        self.content = ContentStore(session)
        self.clock = clock
        self.rng = rng or random.Random()

    def _shuffle_truncate(self, pool: list[StudyItem], limit: int | None = None) -> list[StudyItem]:
        picked = list(pool)
        self.rng.shuffle(picked)
        return picked if limit is None else picked[:limit]

    @staticmethod
    def _check_limit(name: str, value: int) -> None:
        if value < 0:
            raise ReviewValidationError(f"{name} must be >= 0, got {value}")

    def new_item_budget(self, user_id: str, daily_new_limit: int, now: datetime) -> NewItemBudget:
        self._check_limit("daily_new_limit", daily_new_limit)
        today_start = self.clock.start_of_day(now)
        return NewItemBudget(
            daily_limit=daily_new_limit,
            started_today=self.reviews.count_where(
                ReviewStore.started_since_filter(user_id, today_start)
            ),
            learning_count=self.reviews.count_where(ReviewStore.learning_filter(user_id)),
        )

    def due(self, user_id: str, limit: int, locale: str, now: datetime | None = None) -> list[StudyItem]:
        """Due reviews: easiest 2x``limit`` fetched, shuffled, cut to ``limit``."""
        self._check_limit("limit", limit)
        now = now or self.clock.now()
        pool = self.reviews.fetch_study_items(
            ReviewStore.due_filter(user_id, now),
            locale,
            kind="review",
            limit=limit * POOL_FACTOR,
        )
        return self._shuffle_truncate(pool, limit)

    def learning(self, user_id: str, locale: str) -> list[StudyItem]:
        pool = self.reviews.fetch_study_items(
            ReviewStore.learning_filter(user_id), locale, kind="learning"
        )
        return self._shuffle_truncate(pool)

    def today(self, user_id: str, new_limit: int, due_limit: int, locale: str) -> TodaySession:
        """
        Compose today's session.

        Args:
            user_id: Caller identity
            new_limit: Daily ceiling for learning + newly introduced items
            due_limit: Maximum due reviews returned
            locale: Translation locale

        Returns:
            TodaySession with due reviews, learning + new work list, and
            the items learned today (reporting only)
        """
        self._check_limit("new_limit", new_limit)
        self._check_limit("due_limit", due_limit)
        now = self.clock.now()

        due_reviews = self.due(user_id, due_limit, locale, now=now)
        learning = self.learning(user_id, locale)

        budget = self.new_item_budget(user_id, new_limit, now)
        slots = budget.remaining_slots
        new_pool = self.content.fetch_unseen(user_id, locale, limit=slots * POOL_FACTOR)
        fresh = self._shuffle_truncate(new_pool, slots)

        learned_today = self.reviews.fetch_study_items(
            ReviewStore.learned_since_filter(user_id, self.clock.start_of_day(now)),
            locale,
            kind="learned",
        )

        logger.debug(
            f"today user={user_id}: due={len(due_reviews)} learning={len(learning)} "
            f"new={len(fresh)} (started_today={budget.started_today}, slots={slots})"
        )

        return TodaySession(
            due_reviews=due_reviews,
            new_items=learning + fresh,
            learned_today_items=learned_today,
        )

    def stats(self, user_id: str, daily_new_limit: int) -> SessionStats:
        """Aggregate counters; the streak is reported through ``streak.observe``."""
        now = self.clock.now()
        budget = self.new_item_budget(user_id, daily_new_limit, now)
        total_new_available = self.content.count_unseen(user_id)
        user_stats = self.reviews.get_user_stats(user_id)

        if user_stats is None:
            total_xp, current, longest, last_activity = 0, 0, 0, None
        else:
            total_xp = user_stats.total_xp
            current = streak.observe(user_stats.last_activity_at, user_stats.current_streak, now)
            longest = user_stats.longest_streak
            last_activity = user_stats.last_activity_at

        return SessionStats(
            total_xp=total_xp,
            current_streak=current,
            longest_streak=longest,
            last_activity_at=last_activity,
            due_count=self.reviews.count_where(ReviewStore.due_filter(user_id, now)),
            new_items_count=budget.learning_count
            + min(total_new_available, budget.remaining_slots),
            learned_today_count=self.reviews.count_where(
                ReviewStore.learned_since_filter(user_id, self.clock.start_of_day(now))
            ),
            total_new_available=total_new_available,
        )
