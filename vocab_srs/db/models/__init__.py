# SQLAlchemy models
from .base import Base
from .content import Item, ItemTranslation, Lesson
from .learning import Attempt, Review, UserStats

__all__ = [
    # Base
    "Base",
    # Content (read-only to the engine)
    "Lesson",
    "Item",
    "ItemTranslation",
    # Learning state
    "Review",
    "Attempt",
    "UserStats",
]
