import sys
from pathlib import Path

from loguru import logger

from telebox.config.schema import Settings


def configure_logger(settings: Settings) -> None:
    """Configure loguru logger based on settings."""
    logger.remove()  # Remove default handler

    # Console (stderr)
    logger.add(sys.stderr, level=settings.logging.level)

    # File
    if settings.logging.file_enabled:
        path = Path(settings.logging.file_path).expanduser()
        logger.add(
            path,
            rotation=settings.logging.rotation,
            retention=settings.logging.retention,
            level=settings.logging.level,
            enqueue=True,  # Async safe
        )
