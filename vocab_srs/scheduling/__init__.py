"""
Scheduling Module - SM-2 updates, streaks and daily session composition.

Components:
- sm2: SM2Engine, the pure interval/ease update
- streak: advance/observe on local calendar days
- composer: SessionComposer, today's due/learning/new work list and stats
- review_service: ReviewService, the transactional start/answer workflows

composer and review_service depend on the db stores and are imported from
their modules directly.
"""

from vocab_srs.scheduling.sm2 import SM2Config, SM2Engine, SM2Result, SM2State

__all__ = [
    "SM2Config",
    "SM2Engine",
    "SM2Result",
    "SM2State",
]
