"""loguru sink configuration shared by the API and the CLI."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from config import Settings


def configure_logging(settings: Settings, console_format: str | None = None) -> None:
    """Replace the default loguru sink with stderr + optional rotating file."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format=console_format
        or "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level=settings.log_level,
            rotation="10 MB",
            retention=5,
            enqueue=True,
        )
