"""Logging utilities for the pet health Lambda functions."""

import logging
import sys
from typing import Optional

from .config import settings


def setup_logger(name: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """Set up a logger with the shared stdout format.

    Args:
        name: Logger name (defaults to root logger).
        level: Log level (defaults to settings.LOG_LEVEL).

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(name) if name else logging.getLogger()

    log_level = level or settings.LOG_LEVEL
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Handlers are rebuilt on every call so warm Lambda containers do not stack them
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            "[%(levelname)s] %(asctime)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    logger.addHandler(handler)
    logger.propagate = False

    return logger
