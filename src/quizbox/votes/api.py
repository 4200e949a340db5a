from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from quizbox.auth.depends import AuthContext, allow_only_active_user
from quizbox.commons.depends import database_session
from quizbox.commons.schemas import Envelope
from quizbox.core.settings import settings
from quizbox.votes.schemas import QuestionVotes, VoteCreate, VoteTally
from quizbox.votes.service import VotesService

router = APIRouter(prefix=f"{settings.API_PREFIX}/questions", tags=["votes"])


@lru_cache
def get_votes_service() -> VotesService:
    return VotesService.create()


@router.get("/{question_id}/votes", response_model=Envelope[QuestionVotes])
async def get_votes(
    question_id: int,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[VotesService, Depends(get_votes_service)],
) -> Envelope[QuestionVotes]:
    return Envelope(data=await svc.question_votes(session, question_id=question_id))


@router.post("/{question_id}/votes", response_model=Envelope[VoteTally])
async def vote_question(
    question_id: int,
    req: VoteCreate,
    ctx: Annotated[AuthContext, Depends(allow_only_active_user)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[VotesService, Depends(get_votes_service)],
) -> Envelope[VoteTally]:
    tally = await svc.cast(
        session, user_id=ctx.user_id, question_id=question_id, mode=req.mode
    )
    return Envelope(data=tally)


@router.post(
    "/{question_id}/answers/{answer_id}/votes", response_model=Envelope[VoteTally]
)
async def vote_answer(
    question_id: int,
    answer_id: int,
    req: VoteCreate,
    ctx: Annotated[AuthContext, Depends(allow_only_active_user)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[VotesService, Depends(get_votes_service)],
) -> Envelope[VoteTally]:
    tally = await svc.cast(
        session,
        user_id=ctx.user_id,
        question_id=question_id,
        answer_id=answer_id,
        mode=req.mode,
    )
    return Envelope(data=tally)
