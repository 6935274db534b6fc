"""API routers for vocab-srs."""

from vocab_srs.api.routers import dev_router, review_router

__all__ = [
    "review_router",
    "dev_router",
]
