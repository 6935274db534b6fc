"""StudyItem: an item as presented to the learner, with its review state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

StudyItemKind = Literal["review", "learning", "new", "learned"]


@dataclass
class StudyItem:
    """
    One entry of a study session.

    ``review_id`` and the SM-2 fields are None for items the learner has
    never started.
    """

    item_id: int
    term: str
    kind: StudyItemKind
    difficulty: int = 1
    audio_file: str | None = None
    translation: str | None = None
    review_id: int | None = None
    ease_factor: float | None = None
    interval: int | None = None
    repetitions: int | None = None
