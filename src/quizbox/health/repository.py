from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError  # type: ignore[import-not-found]

from quizbox.commons.exceptions import BaseCoreException
from quizbox.commons.logging import logger
from quizbox.core.db import database_manager


async def check_db() -> tuple[bool, str | None]:
    try:
        await database_manager.ping()
    except (SQLAlchemyError, OSError, BaseCoreException) as exc:
        logger.warning("Database health check failed: %s", exc)
        return False, str(exc)
    return True, None
