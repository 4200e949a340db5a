from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]
from starlette import status  # type: ignore[import-not-found]

from quizbox.auth.depends import AuthContext, allow_only_active_user
from quizbox.commons.depends import PageParams, database_session, page_params
from quizbox.commons.schemas import Envelope, Page, Pagination
from quizbox.core.settings import settings
from quizbox.questions.schemas import (
    AnswerCreate,
    AnswerPublic,
    QuestionCreate,
    QuestionDetail,
    QuestionPublic,
)
from quizbox.questions.service import QuestionsService

router = APIRouter(prefix=f"{settings.API_PREFIX}/questions", tags=["questions"])


@lru_cache
def get_questions_service() -> QuestionsService:
    return QuestionsService.create()


@router.get("", response_model=Envelope[Page[QuestionPublic]])
async def list_questions(
    paging: Annotated[PageParams, Depends(page_params)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[QuestionsService, Depends(get_questions_service)],
) -> Envelope[Page[QuestionPublic]]:
    questions, count = await svc.list_questions(
        session, limit=paging.per, offset=paging.offset
    )
    return Envelope(
        data=Page(
            items=[QuestionPublic.model_validate(q) for q in questions],
            pagination=Pagination.build(count, paging.page, paging.per),
        )
    )


@router.get("/{question_id}", response_model=Envelope[QuestionDetail])
async def get_question(
    question_id: int,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[QuestionsService, Depends(get_questions_service)],
) -> Envelope[QuestionDetail]:
    question, answers = await svc.get_question(session, question_id=question_id)
    detail = QuestionDetail(
        **QuestionPublic.model_validate(question).model_dump(),
        answers=[AnswerPublic.model_validate(a) for a in answers],
    )
    return Envelope(data=detail)


@router.post(
    "", response_model=Envelope[QuestionPublic], status_code=status.HTTP_201_CREATED
)
async def ask_question(
    req: QuestionCreate,
    ctx: Annotated[AuthContext, Depends(allow_only_active_user)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[QuestionsService, Depends(get_questions_service)],
) -> Envelope[QuestionPublic]:
    question = await svc.ask(
        session, user_id=ctx.user_id, title=req.title, body=req.body, tags=req.tags
    )
    return Envelope(data=QuestionPublic.model_validate(question))


@router.post(
    "/{question_id}/answers",
    response_model=Envelope[AnswerPublic],
    status_code=status.HTTP_201_CREATED,
)
async def answer_question(
    question_id: int,
    req: AnswerCreate,
    ctx: Annotated[AuthContext, Depends(allow_only_active_user)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[QuestionsService, Depends(get_questions_service)],
) -> Envelope[AnswerPublic]:
    answer = await svc.answer(
        session, user_id=ctx.user_id, question_id=question_id, body=req.body
    )
    return Envelope(data=AnswerPublic.model_validate(answer))
