"""
SM-2 Spaced Repetition Engine.

SM-2 Quality Scale:
0 - Complete blackout, wrong response
1 - Incorrect, but upon seeing answer remembered
2 - Incorrect, but answer seemed easy to recall
3 - Correct, but with significant difficulty
4 - Correct, with some hesitation
5 - Correct, with perfect recall

The update is a pure function of (quality, prior state, today). Next review
dates land on a local day boundary: an item answered at 21:00 with an
interval of 1 is due from midnight the next day.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from vocab_srs.core.clock import start_of_day
from vocab_srs.core.errors import ReviewValidationError

if TYPE_CHECKING:
    from config import Settings

PASSING_QUALITY = 3


@dataclass
class SM2Config:
    """Configuration for the SM-2 algorithm."""

    initial_easiness: float = 2.5
    minimum_easiness: float = 1.3
    first_interval: int = 1  # Days after the first correct answer
    second_interval: int = 6  # Days after the second correct answer
    xp_correct: int = 10
    xp_easy: int = 15

    @classmethod
    def from_settings(cls, settings: Settings) -> SM2Config:
        """Build from application settings (see config.Settings)."""
        return cls(
            initial_easiness=settings.initial_ease_factor,
            minimum_easiness=settings.minimum_ease_factor,
            xp_correct=settings.xp_correct,
            xp_easy=settings.xp_easy,
        )


@dataclass(frozen=True)
class SM2State:
    """The part of a Review that the algorithm reads."""

    ease_factor: float
    interval: int
    repetitions: int


@dataclass(frozen=True)
class SM2Result:
    """New review state produced by one answer."""

    ease_factor: float
    interval: int
    repetitions: int
    next_review_at: datetime


def validate_quality(quality: object) -> int:
    """Return ``quality`` if it is an int in 0..5, else raise."""
    # bool is an int subclass; True/False are not grades
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise ReviewValidationError(f"quality must be an integer 0-5, got {quality!r}")
    if not 0 <= quality <= 5:
        raise ReviewValidationError(f"quality must be between 0 and 5, got {quality}")
    return quality


def is_correct(quality: int) -> bool:
    return quality >= PASSING_QUALITY


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class SM2Engine:
    """
    Implements the SuperMemo-2 update.

    Each review has:
    - Ease Factor (EF): growth multiplier (2.5 default, min 1.3)
    - Interval: days until next review
    - Repetitions: consecutive correct recalls
    """

    def __init__(self, config: SM2Config | None = None):
        self.config = config or SM2Config()

    def initial_state(self) -> SM2State:
        """State of a freshly started (Learning) review."""
        return SM2State(
            ease_factor=self.config.initial_easiness,
            interval=0,
            repetitions=0,
        )

    def next_ease_factor(self, ease_factor: float, quality: int) -> float:
        # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
        miss = 5 - quality
        delta = 0.1 - miss * (0.08 + miss * 0.02)
        return max(self.config.minimum_easiness, ease_factor + delta)

    def update(self, quality: int, prior: SM2State, today: datetime) -> SM2Result:
        """
        Apply one answer to a review state.

        Args:
            quality: SM-2 quality 0-5
            prior: State before the answer
            today: Current local time; the next review is counted from its midnight

        Returns:
            SM2Result with the new state and next review date

        Raises:
            ReviewValidationError: quality is not an int in 0..5
        """
        quality = validate_quality(quality)

        if is_correct(quality):
            repetitions = prior.repetitions + 1
            if prior.repetitions == 0:
                interval = self.config.first_interval
            elif prior.repetitions == 1:
                interval = self.config.second_interval
            else:
                interval = max(1, _round_half_up(prior.interval * prior.ease_factor))
        else:
            # Failed - back to Learning regardless of history
            repetitions = 0
            interval = self.config.first_interval

        ease_factor = self.next_ease_factor(prior.ease_factor, quality)

        return SM2Result(
            ease_factor=ease_factor,
            interval=interval,
            repetitions=repetitions,
            next_review_at=start_of_day(today) + timedelta(days=interval),
        )

    def xp_for(self, quality: int) -> int:
        """XP earned by an answer: nothing for a miss, a bonus for an easy recall."""
        if not is_correct(quality):
            return 0
        return self.config.xp_easy if quality >= 4 else self.config.xp_correct
