"""
Centralized logging.

Stdlib logging, configured in one place for the whole app.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from quizbox.core.settings import settings


@lru_cache
def initialize_logger() -> logging.Logger:
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=settings.LOG_LEVEL.upper(),
    )
    return logging.getLogger("quizbox")


logger = initialize_logger()
