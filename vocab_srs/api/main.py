"""
FastAPI application for the vocab-srs scheduling service.

Provides REST API for:
- Starting items (Unseen -> Learning)
- Submitting SM-2 answers
- Due reviews, today's session and learner stats
- Developer tools (progress reset, day simulation) when enabled
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config import get_settings
from vocab_srs import __version__
from vocab_srs.core.errors import SchedulingError
from vocab_srs.core.log_setup import configure_logging
from vocab_srs.db.database import get_engine, init_db

settings = get_settings()


def _check_database_health() -> tuple[str, str | None]:
    """
    Check database connectivity.

    Returns:
        Tuple of (status, error_message). Status is "ok" or "error".
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "ok", None
    except SQLAlchemyError as e:
        return "error", str(e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    configure_logging(settings)
    logger.info("Starting vocab-srs service...")
    init_db()
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    # Shutdown
    logger.info("Shutting down vocab-srs service...")


app = FastAPI(
    title="vocab-srs",
    description="""
    Spaced-repetition scheduling engine for vocabulary learning.

    ## Review lifecycle

    ```
    Unseen --start--> Learning --correct--> Reviewing
                         ^                      |
                         +-------incorrect------+
    ```

    Identity is read from the `X-User-Id` header.
    """,
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    """Map domain errors to their HTTP status; no state changed."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "retryable": exc.retryable},
    )


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "vocab-srs",
        "version": __version__,
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check() -> dict[str, Any]:
    """Health check with an actual database round-trip."""
    db_status, db_error = _check_database_health()

    result: dict[str, Any] = {
        "status": "healthy" if db_status == "ok" else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {"database": db_status},
        "config": {
            "timezone": settings.timezone,
            "dev_routes": settings.enable_dev_routes,
            "composer": settings.get_composer_config(),
        },
    }
    if db_error:
        result["errors"] = {"database": db_error}

    return result


# ========================================
# Import and mount routers
# ========================================

from vocab_srs.api.routers import dev_router, review_router

app.include_router(review_router.router, prefix="/reviews", tags=["Reviews"])

if settings.enable_dev_routes:
    app.include_router(dev_router.router, prefix="/reviews/dev", tags=["Dev Tools"])
