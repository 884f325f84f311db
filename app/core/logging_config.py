"""
Logging configuration
"""
import logging
import sys

from app.core.config import settings


def setup_logging(level: int = None) -> None:
    """
    Configure application logging

    Args:
        level: Logging level (default: DEBUG when settings.DEBUG is on, else INFO)
    """
    if level is None:
        level = logging.DEBUG if settings.DEBUG else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,  # Override any existing configuration
    )

    # pymongo is chatty at DEBUG (heartbeats, server selection)
    logging.getLogger("pymongo").setLevel(max(level, logging.INFO))

    # Configure uvicorn loggers
    logging.getLogger("uvicorn").setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(level)
