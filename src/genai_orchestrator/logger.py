"""Logging setup based on loguru.

Level policy:
- DEBUG: cache lookups, evictions, request payload sizes
- INFO: service lifecycle, successful generations
- WARNING: retries, terminal provider failures, unknown model rates
- ERROR: unexpected exceptions (use ``logger.exception``)

Usage:
    from genai_orchestrator.logger import logger

    logger.info("Generated {} in {:.0f}ms", model, elapsed_ms)

API keys must never be passed to the logger.
"""

from __future__ import annotations

import sys

from loguru import logger

from genai_orchestrator.config import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | "
    "{message}"
)

logger.remove()
logger.add(
    sys.stderr,
    format=CONSOLE_FORMAT,
    level=settings.log_level,
    backtrace=False,
    diagnose=False,
)

__all__ = ["logger"]
