"""
Caller identity and per-request collaborators as FastAPI dependencies.

Identity arrives from the external auth layer as an opaque header value.
Endpoints that mutate a user's state use ``require_user_id``; read-only
endpoints use ``optional_user_id`` and fall back to the anonymous id.
"""

from __future__ import annotations

import random

from fastapi import HTTPException, Request

from config import get_settings
from vocab_srs.core.clock import Clock

settings = get_settings()

_clock = Clock(settings.timezone)


def _header_value(request: Request) -> str | None:
    value = request.headers.get(settings.user_id_header)
    if value is None or not value.strip():
        return None
    return value.strip()


def require_user_id(request: Request) -> str:
    """Reject the request with 400 when no identity header is present."""
    user_id = _header_value(request)
    if user_id is None:
        raise HTTPException(status_code=400, detail=f"{settings.user_id_header} header required")
    return user_id


def optional_user_id(request: Request) -> str:
    """Identity header value, or the anonymous id when absent."""
    return _header_value(request) or settings.anonymous_user_id


def get_clock() -> Clock:
    return _clock


def get_rng() -> random.Random:
    """Fresh RNG per request; seeded when ``shuffle_seed`` is configured."""
    return random.Random(settings.shuffle_seed)
