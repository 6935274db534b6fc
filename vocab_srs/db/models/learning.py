"""
Learning state models.

Review holds the SM-2 state of one (user, item) pair. Attempt is the
append-only answer log. UserStats carries XP and streak counters.
Timestamps are naive local wall-clock values supplied by the Clock.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base
from .content import Item


class Review(Base):
    """SM-2 state for one user and one item."""

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="uq_review_user_item"),
        CheckConstraint("ease_factor >= 1.3", name="ck_review_ease_floor"),
        CheckConstraint("interval >= 0", name="ck_review_interval"),
        CheckConstraint("repetitions >= 0", name="ck_review_repetitions"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    item_id: Mapped[int] = mapped_column(
        ForeignKey("items.id", ondelete="CASCADE"), nullable=False
    )
    ease_factor: Mapped[float] = mapped_column(Float, nullable=False, default=2.5)
    interval: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    repetitions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_review_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    last_reviewed_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    item: Mapped[Item] = relationship()
    attempts: Mapped[list[Attempt]] = relationship(
        back_populates="review", cascade="all, delete-orphan", passive_deletes=True
    )

    # Optimistic concurrency: UPDATE ... WHERE version = :old
    __mapper_args__ = {"version_id_col": version}

    @property
    def is_learning(self) -> bool:
        return self.repetitions == 0

    def __repr__(self) -> str:
        return (
            f"<Review id={self.id} user={self.user_id!r} item={self.item_id} "
            f"reps={self.repetitions} interval={self.interval} ef={self.ease_factor:.2f}>"
        )


class Attempt(Base):
    """One submitted answer. Never updated after insert."""

    __tablename__ = "attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    review_id: Mapped[int] = mapped_column(
        ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    quality: Mapped[int] = mapped_column(Integer, nullable=False)
    response_time_ms: Mapped[int | None] = mapped_column(Integer)
    user_answer: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    review: Mapped[Review] = relationship(back_populates="attempts")


class UserStats(Base):
    """Per-user XP and streak counters."""

    __tablename__ = "user_stats"
    __table_args__ = (
        CheckConstraint("total_xp >= 0", name="ck_stats_xp"),
        CheckConstraint("longest_streak >= current_streak", name="ck_stats_longest"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    total_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_activity_at: Mapped[datetime | None] = mapped_column(DateTime)
