"""
Developer tools router.

Mounted only when ``enable_dev_routes`` is set. Lets a tester wipe their
progress or pretend days have passed without waiting for the calendar.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, StrictInt

from vocab_srs.api.identity import require_user_id
from vocab_srs.api.routers.review_router import get_review_service
from vocab_srs.scheduling.review_service import ReviewService

router = APIRouter()


class SimulateDaysRequest(BaseModel):
    days: StrictInt = Field(..., ge=1, le=365, description="Days to move the user's history back")


class DevMessage(BaseModel):
    message: str


@router.post("/reset", response_model=DevMessage, summary="Reset caller progress")
def reset_progress(
    user_id: str = Depends(require_user_id),
    service: ReviewService = Depends(get_review_service),
) -> DevMessage:
    """Delete every review, attempt and stats row of the caller."""
    removed = service.reset(user_id)
    return DevMessage(
        message=f"Reset {removed['reviews']} reviews and {removed['attempts']} attempts"
    )


@router.post("/simulate-days", response_model=DevMessage, summary="Simulate elapsed days")
def simulate_days(
    request: SimulateDaysRequest,
    user_id: str = Depends(require_user_id),
    service: ReviewService = Depends(get_review_service),
) -> DevMessage:
    """Shift the caller's review history ``days`` into the past."""
    shifted = service.simulate_days(user_id, request.days)
    return DevMessage(message=f"Simulated {request.days} days on {shifted} reviews")
