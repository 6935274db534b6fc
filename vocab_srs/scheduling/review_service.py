"""
Review workflows that mutate learner state.

Each public method runs as a single transaction through ``atomic``: the
Review update, the Attempt insert and the UserStats upsert of one answer
commit together or not at all.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger
from sqlalchemy.orm import Session

from vocab_srs.core.clock import Clock
from vocab_srs.core.errors import (
    ReviewNotFoundError,
    ReviewOwnershipError,
    ReviewValidationError,
)
from vocab_srs.db.content_store import ContentStore
from vocab_srs.db.database import atomic
from vocab_srs.db.review_store import ReviewStore
from vocab_srs.scheduling.sm2 import SM2Engine, SM2Result, SM2State, is_correct, validate_quality


class ReviewService:
    """Start learning, submit answers, and the dev-only reset/simulation tools."""

    def __init__(
        self,
        session: Session,
        clock: Clock,
        engine: SM2Engine | None = None,
        max_answer_length: int = 500,
    ):
        self.session = session
        self.clock = clock
        self.engine = engine or SM2Engine()
        self.max_answer_length = max_answer_length
        self.reviews = ReviewStore(session)
        self.content = ContentStore(session)

    @staticmethod
    def _require_user(user_id: str) -> str:
        if not user_id or not user_id.strip():
            raise ReviewValidationError("user_id is required")
        return user_id

    def start(self, user_id: str, item_ids: Iterable[int]) -> int:
        """
        Move items from Unseen to Learning.

        Idempotent: items that already have a review are silently skipped and
        not counted. Ids that match no item are ignored.

        Returns:
            Number of reviews created
        """
        self._require_user(user_id)
        requested = set(item_ids)
        if not requested:
            return 0

        with atomic(self.session, "start"):
            known = self.content.existing_item_ids(requested)
            unknown = requested - known
            if unknown:
                logger.warning(f"start user={user_id}: ignoring unknown item ids {sorted(unknown)}")

            created = self.reviews.start_reviews(
                user_id, known, now=self.clock.now(), initial=self.engine.initial_state()
            )

        logger.info(f"start user={user_id}: {created} created of {len(requested)} requested")
        return created

    def submit_answer(
        self,
        user_id: str,
        review_id: int,
        quality: int,
        response_time_ms: int | None = None,
        user_answer: str | None = None,
    ) -> SM2Result:
        """
        Apply an answer to a review.

        Raises:
            ReviewValidationError: bad quality, response time or answer length
            ReviewNotFoundError: unknown review id
            ReviewOwnershipError: review belongs to another user
            StorageError: transaction failed or lost a concurrent update
        """
        self._require_user(user_id)
        quality = validate_quality(quality)
        if response_time_ms is not None and response_time_ms < 0:
            raise ReviewValidationError("response_time_ms must be >= 0")
        if user_answer is not None and len(user_answer) > self.max_answer_length:
            raise ReviewValidationError(
                f"user_answer exceeds {self.max_answer_length} characters"
            )

        correct = is_correct(quality)

        with atomic(self.session, "submit_answer"):
            review = self.reviews.find_review(review_id, lock=True)
            if review is None:
                raise ReviewNotFoundError(review_id)
            if review.user_id != user_id:
                raise ReviewOwnershipError(review_id)

            now = self.clock.now()
            prior = SM2State(review.ease_factor, review.interval, review.repetitions)
            result = self.engine.update(quality, prior, now)

            self.reviews.save_review_state(review, result, now)
            self.reviews.insert_attempt(
                review,
                quality=quality,
                is_correct=correct,
                now=now,
                response_time_ms=response_time_ms,
                user_answer=user_answer,
            )
            if correct:
                self.reviews.upsert_user_stats_delta(user_id, self.engine.xp_for(quality), now)

        logger.info(
            f"answer user={user_id} review={review_id} q={quality}: "
            f"reps {prior.repetitions}->{result.repetitions}, interval {result.interval}d, "
            f"ef {result.ease_factor:.2f}"
        )
        return result

    def reset(self, user_id: str) -> dict[str, int]:
        """Delete all progress of a user. Dev/test only."""
        self._require_user(user_id)
        with atomic(self.session, "reset"):
            removed = self.reviews.delete_user_progress(user_id)
        logger.info(f"reset user={user_id}: {removed}")
        return removed

    def simulate_days(self, user_id: str, days: int) -> int:
        """Pretend ``days`` days have passed for a user. Dev/test only."""
        self._require_user(user_id)
        if days < 1:
            raise ReviewValidationError("days must be >= 1")
        with atomic(self.session, "simulate_days"):
            shifted = self.reviews.shift_user_timestamps(user_id, days)
        logger.info(f"simulate_days user={user_id}: shifted {shifted} reviews by {days}d")
        return shifted
