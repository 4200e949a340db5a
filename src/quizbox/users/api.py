from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from quizbox.auth.depends import (
    AuthContext,
    allow_only_active_user,
    allow_only_active_user_no_refresh,
    get_auth_service,
)
from quizbox.auth.schemas import UserPublic
from quizbox.auth.service import AuthService
from quizbox.commons.depends import PageParams, database_session, page_params
from quizbox.commons.schemas import Envelope, Page, Pagination
from quizbox.core.settings import settings
from quizbox.users.exceptions import UsersServiceForbiddenException
from quizbox.users.schemas import UserUpdateRequest

router = APIRouter(prefix=f"{settings.API_PREFIX}/users", tags=["users"])


@router.get("", response_model=Envelope[Page[UserPublic]])
async def list_users(
    paging: Annotated[PageParams, Depends(page_params)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> Envelope[Page[UserPublic]]:
    users, count = await svc.list_users(session, limit=paging.per, offset=paging.offset)
    return Envelope(
        data=Page(
            items=[UserPublic.model_validate(u) for u in users],
            pagination=Pagination.build(count, paging.page, paging.per),
        )
    )


@router.get("/{user_id}", response_model=Envelope[UserPublic])
async def get_user(
    user_id: int,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> Envelope[UserPublic]:
    user = await svc.get_user(session, user_id=user_id)
    return Envelope(data=UserPublic.model_validate(user))


@router.put("/{user_id}", response_model=Envelope[UserPublic])
async def update_user(
    user_id: int,
    req: UserUpdateRequest,
    ctx: Annotated[AuthContext, Depends(allow_only_active_user)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> Envelope[UserPublic]:
    if user_id != ctx.user_id:
        raise UsersServiceForbiddenException("could not update that user")
    user = await svc.update_user(
        session,
        user_id=user_id,
        first_name=req.first_name,
        last_name=req.last_name,
        email=str(req.email),
    )
    return Envelope(data=UserPublic.model_validate(user))


@router.delete("/{user_id}", response_model=Envelope[None])
async def delete_user(
    user_id: int,
    ctx: Annotated[AuthContext, Depends(allow_only_active_user_no_refresh)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> Envelope[None]:
    if user_id != ctx.user_id:
        raise UsersServiceForbiddenException("could not delete another user")
    await svc.delete_user(session, user_id=user_id)
    return Envelope(message="user deleted")
