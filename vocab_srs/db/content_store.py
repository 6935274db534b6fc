"""
Read-only access to lessons, items and translations.

The scheduling engine never writes content; this store answers "which items
exist" and "which items has this user never started".
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import and_, exists, func, select
from sqlalchemy.orm import Session

from vocab_srs.core.study_item import StudyItem
from vocab_srs.db.models import Item, ItemTranslation, Review


def translation_join(locale: str):
    """ON clause for the item's translation in ``locale``."""
    return and_(ItemTranslation.item_id == Item.id, ItemTranslation.locale == locale)


class ContentStore:
    """Item lookups used by the session composer and the start workflow."""

    def __init__(self, session: Session):
        self.session = session

    def existing_item_ids(self, item_ids: Iterable[int]) -> set[int]:
        """Return the subset of ``item_ids`` that exist."""
        ids = set(item_ids)
        if not ids:
            return set()
        rows = self.session.execute(select(Item.id).where(Item.id.in_(ids)))
        return {row[0] for row in rows}

    @staticmethod
    def unseen_filter(user_id: str):
        """Items with no Review row for ``user_id``."""
        return ~exists().where(and_(Review.item_id == Item.id, Review.user_id == user_id))

    def count_unseen(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(Item).where(self.unseen_filter(user_id))
        return self.session.execute(stmt).scalar_one()

    def fetch_unseen(self, user_id: str, locale: str, limit: int) -> list[StudyItem]:
        """Unseen items, easiest first (difficulty, then lesson order, then id)."""
        if limit <= 0:
            return []
        stmt = (
            select(Item, ItemTranslation.translation)
            .outerjoin(ItemTranslation, translation_join(locale))
            .where(self.unseen_filter(user_id))
            .order_by(Item.difficulty.asc(), Item.order_index.asc(), Item.id.asc())
            .limit(limit)
        )
        return [
            StudyItem(
                item_id=item.id,
                term=item.term,
                kind="new",
                difficulty=item.difficulty,
                audio_file=item.audio_file,
                translation=translation,
            )
            for item, translation in self.session.execute(stmt)
        ]
