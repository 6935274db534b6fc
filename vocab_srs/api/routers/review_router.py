"""
Review scheduling router.

Endpoints consumed by the learning client:
- POST /reviews/start             Unseen -> Learning (idempotent)
- POST /reviews/{id}/answer       Apply an SM-2 answer
- GET  /reviews/due               Due reviews
- GET  /reviews/today             Today's session (due + learning/new + learned today)
- GET  /reviews/stats             Dashboard counters

Domain errors (validation, not found, ownership, storage) propagate to the
handlers registered in vocab_srs.api.main and become 4xx/503 responses.
"""

from __future__ import annotations

import random
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from config import get_settings
from vocab_srs.api.identity import get_clock, get_rng, optional_user_id, require_user_id
from vocab_srs.core.clock import Clock
from vocab_srs.core.study_item import StudyItem
from vocab_srs.db.database import get_session
from vocab_srs.scheduling.composer import SessionComposer
from vocab_srs.scheduling.review_service import ReviewService
from vocab_srs.scheduling.sm2 import SM2Config, SM2Engine

settings = get_settings()

router = APIRouter()


# ========================================
# Request/Response Models
# ========================================


class CamelModel(BaseModel):
    """Serializes snake_case fields as camelCase for the client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StartRequest(CamelModel):
    """Request model for starting items."""

    item_ids: list[StrictInt] = Field(..., max_length=500, description="Item ids to start learning")


class StartResponse(CamelModel):
    created: int


class AnswerRequest(CamelModel):
    """Request model for submitting an answer."""

    quality: StrictInt = Field(..., ge=0, le=5, description="SM-2 quality 0-5")
    response_time_ms: StrictInt | None = Field(None, ge=0, description="Time to answer (ms)")
    user_answer: str | None = Field(
        None, max_length=settings.max_answer_length, description="Free-text answer"
    )


class AnswerResponse(CamelModel):
    """New SM-2 state after an answer."""

    ease_factor: float
    interval: int
    repetitions: int
    next_review_at: datetime


class StudyItemResponse(CamelModel):
    """An item as presented in a session."""

    review_id: int | None
    item_id: int
    term: str
    audio_file: str | None
    translation: str | None
    difficulty: int
    ease_factor: float | None
    interval: int | None
    repetitions: int | None
    type: str  # "review", "learning", "new", "learned"


class TodayResponse(CamelModel):
    """Response model for today's session."""

    due_reviews: list[StudyItemResponse]
    new_items: list[StudyItemResponse]
    learned_today_items: list[StudyItemResponse]
    total_due: int
    total_new: int
    total_learned_today: int


class StatsResponse(CamelModel):
    """Dashboard counters."""

    total_xp: int
    current_streak: int
    longest_streak: int
    last_activity_at: datetime | None
    due_reviews: int
    new_items: int
    learned_today: int
    total_new_available: int


def _item_response(item: StudyItem) -> StudyItemResponse:
    return StudyItemResponse(
        review_id=item.review_id,
        item_id=item.item_id,
        term=item.term,
        audio_file=item.audio_file,
        translation=item.translation,
        difficulty=item.difficulty,
        ease_factor=item.ease_factor,
        interval=item.interval,
        repetitions=item.repetitions,
        type=item.kind,
    )


def get_review_service(
    db: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> ReviewService:
    return ReviewService(
        db,
        clock,
        engine=SM2Engine(SM2Config.from_settings(settings)),
        max_answer_length=settings.max_answer_length,
    )


def get_composer(
    db: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
    rng: random.Random = Depends(get_rng),
) -> SessionComposer:
    return SessionComposer(db, clock, rng=rng)


# ========================================
# Mutating Endpoints
# ========================================


@router.post("/start", response_model=StartResponse, summary="Start learning items")
def start_learning(
    request: StartRequest,
    user_id: str = Depends(require_user_id),
    service: ReviewService = Depends(get_review_service),
) -> StartResponse:
    """
    Create Learning reviews for the given items.

    Items the caller already started are skipped and not counted, so the
    call is safe to retry.
    """
    return StartResponse(created=service.start(user_id, request.item_ids))


@router.post("/{review_id}/answer", response_model=AnswerResponse, summary="Submit answer")
def submit_answer(
    review_id: int,
    request: AnswerRequest,
    user_id: str = Depends(require_user_id),
    service: ReviewService = Depends(get_review_service),
) -> AnswerResponse:
    """
    Apply an answer to one of the caller's reviews.

    Not idempotent: a retried request that already succeeded records a
    second attempt and advances the review again.
    """
    result = service.submit_answer(
        user_id,
        review_id,
        request.quality,
        response_time_ms=request.response_time_ms,
        user_answer=request.user_answer,
    )
    return AnswerResponse(
        ease_factor=result.ease_factor,
        interval=result.interval,
        repetitions=result.repetitions,
        next_review_at=result.next_review_at,
    )


# ========================================
# Read-only Endpoints
# ========================================


@router.get("/due", response_model=list[StudyItemResponse], summary="Get due reviews")
def get_due_reviews(
    limit: int = Query(10, ge=0, le=settings.max_due_limit),
    locale: str = Query(settings.default_locale),
    user_id: str = Depends(optional_user_id),
    composer: SessionComposer = Depends(get_composer),
) -> list[StudyItemResponse]:
    """Due reviews, biased toward easier items."""
    return [_item_response(item) for item in composer.due(user_id, limit, locale)]


@router.get("/today", response_model=TodayResponse, summary="Get today's session")
def get_today_session(
    new_limit: int = Query(settings.default_new_limit, alias="newLimit", ge=0),
    due_limit: int = Query(
        settings.default_due_limit, alias="dueLimit", ge=0, le=settings.max_due_limit
    ),
    locale: str = Query(settings.default_locale),
    user_id: str = Depends(optional_user_id),
    composer: SessionComposer = Depends(get_composer),
) -> TodayResponse:
    """
    Compose today's session.

    ``newItems`` holds the learning items (always included) followed by
    new items, together never more than ``newLimit`` introduced per day.
    """
    session = composer.today(user_id, new_limit, due_limit, locale)
    return TodayResponse(
        due_reviews=[_item_response(i) for i in session.due_reviews],
        new_items=[_item_response(i) for i in session.new_items],
        learned_today_items=[_item_response(i) for i in session.learned_today_items],
        total_due=session.total_due,
        total_new=session.total_new,
        total_learned_today=session.total_learned_today,
    )


@router.get("/stats", response_model=StatsResponse, summary="Get learner stats")
def get_stats(
    daily_new_limit: int = Query(settings.default_new_limit, alias="dailyNewLimit", ge=0),
    user_id: str = Depends(optional_user_id),
    composer: SessionComposer = Depends(get_composer),
) -> StatsResponse:
    """XP, streaks and the counters matching what ``/today`` would return."""
    stats = composer.stats(user_id, daily_new_limit)
    return StatsResponse(
        total_xp=stats.total_xp,
        current_streak=stats.current_streak,
        longest_streak=stats.longest_streak,
        last_activity_at=stats.last_activity_at,
        due_reviews=stats.due_count,
        new_items=stats.new_items_count,
        learned_today=stats.learned_today_count,
        total_new_available=stats.total_new_available,
    )
