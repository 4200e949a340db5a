from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass

from fastapi import Query, Request  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from quizbox.core.db import database_manager


async def database_session() -> AsyncGenerator[AsyncSession, None]:
    await database_manager.initialize()
    async with database_manager.session() as session:
        yield session


@dataclass(frozen=True)
class ClientInfo:
    ip_address: str
    user_agent: str


def client_info(request: Request) -> ClientInfo:
    """Caller address and agent, as recorded on new sessions."""
    ip = ""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Left-most entry is the original client.
        ip = forwarded.split(",")[0].strip()
    if not ip:
        ip = request.headers.get("X-Real-IP", "").strip()
    if not ip and request.client:
        ip = request.client.host
    return ClientInfo(ip_address=ip, user_agent=request.headers.get("User-Agent", ""))


@dataclass(frozen=True)
class PageParams:
    page: int
    per: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per


def page_params(
    page: int = Query(default=1, ge=1),
    per: int = Query(default=20, ge=1, le=100),
) -> PageParams:
    return PageParams(page=page, per=per)
