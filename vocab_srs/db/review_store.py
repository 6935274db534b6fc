"""
Review persistence: Review rows, the Attempt log and UserStats.

The candidate predicates (due / learning / started since / learned since)
are defined here once and shared by the list queries and the counters, so
the numbers shown before a session always match the items handed out.

Usage:
    store = ReviewStore(session)
    store.count_where(ReviewStore.due_filter(user_id, now))
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vocab_srs.core.study_item import StudyItem, StudyItemKind
from vocab_srs.db.content_store import translation_join
from vocab_srs.db.models import Attempt, Item, ItemTranslation, Review, UserStats
from vocab_srs.scheduling import streak
from vocab_srs.scheduling.sm2 import SM2Result, SM2State


class ReviewStore:
    """Repository over reviews, attempts and user stats for one session."""

    def __init__(self, session: Session):
        self.session = session

    # ========================================
    # Predicates
    # ========================================

    @staticmethod
    def due_filter(user_id: str, now: datetime):
        """Reviewing items whose scheduled date has passed."""
        return and_(
            Review.user_id == user_id,
            Review.repetitions >= 1,
            Review.next_review_at <= now,
        )

    @staticmethod
    def learning_filter(user_id: str):
        """Started but not yet answered correctly since the last reset."""
        return and_(Review.user_id == user_id, Review.repetitions == 0)

    @staticmethod
    def started_since_filter(user_id: str, since: datetime):
        return and_(Review.user_id == user_id, Review.created_at >= since)

    @staticmethod
    def learned_since_filter(user_id: str, since: datetime):
        return and_(
            Review.user_id == user_id,
            Review.repetitions >= 1,
            Review.last_reviewed_at >= since,
        )

    def count_where(self, *criteria) -> int:
        stmt = select(func.count()).select_from(Review).where(*criteria)
        return self.session.execute(stmt).scalar_one()

    # ========================================
    # Reviews
    # ========================================

    def find_review(self, review_id: int, lock: bool = False) -> Review | None:
        """
        Load a review by id.

        With ``lock=True`` the row is selected FOR UPDATE so concurrent
        answers to the same review serialize; the version counter catches
        any writer that slips past on backends without row locks.
        """
        stmt = select(Review).where(Review.id == review_id)
        if lock:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def started_item_ids(self, user_id: str, item_ids: Iterable[int]) -> set[int]:
        ids = set(item_ids)
        if not ids:
            return set()
        stmt = select(Review.item_id).where(Review.user_id == user_id, Review.item_id.in_(ids))
        return {row[0] for row in self.session.execute(stmt)}

    def start_reviews(
        self,
        user_id: str,
        item_ids: Iterable[int],
        now: datetime,
        initial: SM2State,
    ) -> int:
        """
        Create Learning reviews for items the user has not started.

        Items that already have a review are skipped. Each insert runs in its
        own savepoint so a row created concurrently by another request is a
        no-op rather than a failure. Returns the number of rows created.
        """
        ids = sorted(set(item_ids))
        already = self.started_item_ids(user_id, ids)
        created = 0

        for item_id in ids:
            if item_id in already:
                continue
            try:
                with self.session.begin_nested():
                    self.session.add(
                        Review(
                            user_id=user_id,
                            item_id=item_id,
                            ease_factor=initial.ease_factor,
                            interval=initial.interval,
                            repetitions=initial.repetitions,
                            next_review_at=now,
                            last_reviewed_at=None,
                            created_at=now,
                        )
                    )
            except IntegrityError:
                logger.debug(f"Review for user={user_id} item={item_id} already exists, skipped")
                continue
            created += 1

        return created

    def save_review_state(self, review: Review, result: SM2Result, now: datetime) -> Review:
        """Write an SM-2 result onto a (locked) review."""
        review.ease_factor = result.ease_factor
        review.interval = result.interval
        review.repetitions = result.repetitions
        review.next_review_at = result.next_review_at
        review.last_reviewed_at = now
        self.session.flush()
        return review

    def insert_attempt(
        self,
        review: Review,
        quality: int,
        is_correct: bool,
        now: datetime,
        response_time_ms: int | None = None,
        user_answer: str | None = None,
    ) -> Attempt:
        attempt = Attempt(
            review_id=review.id,
            quality=quality,
            is_correct=is_correct,
            response_time_ms=response_time_ms,
            user_answer=user_answer,
            created_at=now,
        )
        self.session.add(attempt)
        self.session.flush()
        return attempt

    # ========================================
    # Study item queries
    # ========================================

    def fetch_study_items(
        self,
        criteria,
        locale: str,
        kind: StudyItemKind,
        limit: int | None = None,
    ) -> list[StudyItem]:
        """Reviews matching ``criteria`` joined with their item, easiest first."""
        stmt = (
            select(Review, Item, ItemTranslation.translation)
            .join(Item, Review.item_id == Item.id)
            .outerjoin(ItemTranslation, translation_join(locale))
            .where(criteria)
            .order_by(Item.difficulty.asc(), Item.order_index.asc(), Review.id.asc())
        )
        if limit is not None:
            if limit <= 0:
                return []
            stmt = stmt.limit(limit)

        return [
            StudyItem(
                item_id=item.id,
                term=item.term,
                kind=kind,
                difficulty=item.difficulty,
                audio_file=item.audio_file,
                translation=translation,
                review_id=review.id,
                ease_factor=review.ease_factor,
                interval=review.interval,
                repetitions=review.repetitions,
            )
            for review, item, translation in self.session.execute(stmt)
        ]

    # ========================================
    # User stats
    # ========================================

    def get_user_stats(self, user_id: str, lock: bool = False) -> UserStats | None:
        stmt = select(UserStats).where(UserStats.user_id == user_id)
        if lock:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def _create_user_stats(self, user_id: str) -> UserStats:
        """
        Insert an empty stats row, or lock the one a concurrent request
        created after our lookup found nothing.
        """
        try:
            with self.session.begin_nested():
                stats = UserStats(
                    user_id=user_id,
                    total_xp=0,
                    current_streak=0,
                    longest_streak=0,
                    last_activity_at=None,
                )
                self.session.add(stats)
            return stats
        except IntegrityError:
            logger.debug(f"UserStats for user={user_id} created concurrently, reusing it")
            return self.get_user_stats(user_id, lock=True)

    def upsert_user_stats_delta(self, user_id: str, xp_delta: int, now: datetime) -> UserStats:
        """
        Record a correct answer: add XP, advance the streak, stamp activity.

        Creates the row on the user's first correct answer.
        """
        stats = self.get_user_stats(user_id, lock=True)
        if stats is None:
            stats = self._create_user_stats(user_id)

        new_streak = streak.advance(stats.last_activity_at, stats.current_streak, now)
        stats.total_xp = stats.total_xp + max(0, xp_delta)
        stats.current_streak = new_streak
        stats.longest_streak = streak.next_longest(new_streak, stats.longest_streak)
        stats.last_activity_at = now
        self.session.flush()
        return stats

    # ========================================
    # Dev tools
    # ========================================

    def delete_user_progress(self, user_id: str) -> dict[str, int]:
        """Remove every review, attempt and stats row of a user."""
        review_ids = select(Review.id).where(Review.user_id == user_id)
        no_sync = {"synchronize_session": False}
        attempts = self.session.execute(
            delete(Attempt).where(Attempt.review_id.in_(review_ids)), execution_options=no_sync
        ).rowcount
        reviews = self.session.execute(
            delete(Review).where(Review.user_id == user_id), execution_options=no_sync
        ).rowcount
        stats = self.session.execute(
            delete(UserStats).where(UserStats.user_id == user_id), execution_options=no_sync
        ).rowcount
        self.session.expire_all()
        return {"attempts": attempts, "reviews": reviews, "stats": stats}

    def shift_user_timestamps(self, user_id: str, days: int) -> int:
        """Move a user's history ``days`` into the past. Returns reviews touched."""
        delta = timedelta(days=days)
        reviews = self.session.execute(
            select(Review).where(Review.user_id == user_id)
        ).scalars().all()

        for review in reviews:
            review.next_review_at = review.next_review_at - delta
            review.created_at = review.created_at - delta
            if review.last_reviewed_at is not None:
                review.last_reviewed_at = review.last_reviewed_at - delta
            for attempt in review.attempts:
                attempt.created_at = attempt.created_at - delta

        stats = self.get_user_stats(user_id)
        if stats is not None and stats.last_activity_at is not None:
            stats.last_activity_at = stats.last_activity_at - delta

        self.session.flush()
        return len(reviews)
