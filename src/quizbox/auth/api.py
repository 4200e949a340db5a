from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends  # type: ignore[import-not-found]
from fastapi.responses import JSONResponse  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]
from starlette import status  # type: ignore[import-not-found]

from quizbox.auth.depends import (
    AuthContext,
    allow_only_active_user_no_refresh,
    allow_with_session,
    get_auth_service,
)
from quizbox.auth.schemas import LoginRequest, LoginResponse, RegisterRequest, UserPublic
from quizbox.auth.service import AuthService
from quizbox.commons.depends import ClientInfo, client_info, database_session
from quizbox.commons.schemas import Envelope
from quizbox.core.settings import settings

router = APIRouter(prefix=f"{settings.API_PREFIX}/users", tags=["auth"])


@router.post(
    "", response_model=Envelope[UserPublic], status_code=status.HTTP_201_CREATED
)
async def register(
    req: RegisterRequest,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> Envelope[UserPublic]:
    user = await svc.register(
        session,
        first_name=req.first_name,
        last_name=req.last_name,
        email=str(req.email),
        password=req.password,
        password_confirmation=req.password_confirmation,
    )
    return Envelope(data=UserPublic.model_validate(user))


@router.post("/login", response_model=Envelope[LoginResponse])
async def login(
    req: LoginRequest,
    client: Annotated[ClientInfo, Depends(client_info)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    token, user, _ = await svc.login(
        session,
        email=str(req.email),
        password=req.password,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    data = Envelope(
        data=LoginResponse(user=UserPublic.model_validate(user), token=token)
    ).model_dump(mode="json")
    resp = JSONResponse(status_code=status.HTTP_200_OK, content=data)
    resp.headers[settings.AUTH_TOKEN_HEADER] = token
    return resp


@router.delete("/logout", response_model=Envelope[None])
async def logout(
    ctx: Annotated[AuthContext, Depends(allow_only_active_user_no_refresh)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> Envelope[None]:
    await svc.logout(session, session_id=ctx.session_id)
    return Envelope(message="logged out")


@router.get("/me", response_model=Envelope[UserPublic])
async def me(
    ctx: Annotated[AuthContext, Depends(allow_with_session)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> Envelope[UserPublic]:
    user = await svc.get_user(session, user_id=ctx.user_id)
    return Envelope(data=UserPublic.model_validate(user))
