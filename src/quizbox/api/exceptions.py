from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from quizbox.commons.exceptions import (
    BaseCoreException,
    BaseServiceConflictException,
    BaseServiceException,
    BaseServiceForbiddenException,
    BaseServiceNotFoundException,
    BaseServiceUnauthorizedException,
    BaseServiceUnProcessableException,
)
from quizbox.commons.logging import logger


def _envelope(code: int, message: str, details: str | None = None) -> JSONResponse:
    content: dict = {"success": False, "message": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=code, content=content)


def status_for(exc: BaseServiceException) -> int:
    if isinstance(exc, BaseServiceNotFoundException):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, BaseServiceUnProcessableException):
        return status.HTTP_422_UNPROCESSABLE_CONTENT
    if isinstance(exc, BaseServiceUnauthorizedException):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, BaseServiceForbiddenException):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, BaseServiceConflictException):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def configure_global_exception_handlers(app: FastAPI) -> FastAPI:
    @app.exception_handler(BaseServiceException)
    async def service_exception_handler(
        request: Request, exc: BaseServiceException
    ) -> JSONResponse:
        return _envelope(status_for(exc), exc.message, exc.details)

    @app.exception_handler(BaseCoreException)
    async def core_exception_handler(
        request: Request, exc: BaseCoreException
    ) -> JSONResponse:
        logger.error(
            "%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.details
        )
        return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal error")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        return _envelope(
            status.HTTP_422_UNPROCESSABLE_CONTENT, "invalid request provided", details
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _envelope(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal error")

    return app
