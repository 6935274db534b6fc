"""
Content table models.

Lessons, items and their translations are owned by the content tooling.
The scheduling engine only reads them.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

ITEM_TYPES = ("word", "phrase", "expression", "dialogue", "verb")


class Lesson(Base):
    """A themed group of items (e.g., "Greetings")."""

    __tablename__ = "lessons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    icon: Mapped[str | None] = mapped_column(Text)
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(default=func.now())

    items: Mapped[list[Item]] = relationship(back_populates="lesson")


class Item(Base):
    """A single vocabulary unit: word, phrase, expression, dialogue or verb."""

    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint(
            "item_type IN (" + ", ".join(f"'{t}'" for t in ITEM_TYPES) + ")",
            name="ck_item_type",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lesson_id: Mapped[int | None] = mapped_column(ForeignKey("lessons.id"))
    item_type: Mapped[str] = mapped_column(Text, nullable=False, default="word")
    term: Mapped[str] = mapped_column(Text, nullable=False)
    audio_file: Mapped[str | None] = mapped_column(Text)
    difficulty: Mapped[int] = mapped_column(Integer, default=1)  # sort key only
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(default=func.now())

    lesson: Mapped[Lesson | None] = relationship(back_populates="items")
    translations: Mapped[list[ItemTranslation]] = relationship(
        back_populates="item", cascade="all, delete-orphan"
    )


class ItemTranslation(Base):
    """Translation of an item into one locale."""

    __tablename__ = "item_translations"
    __table_args__ = (UniqueConstraint("item_id", "locale", name="uq_item_locale"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[int] = mapped_column(
        ForeignKey("items.id", ondelete="CASCADE"), nullable=False
    )
    locale: Mapped[str] = mapped_column(Text, nullable=False, default="fr")
    translation: Mapped[str] = mapped_column(Text, nullable=False)

    item: Mapped[Item] = relationship(back_populates="translations")
