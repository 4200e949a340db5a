from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from quizbox.questions.models import Answer, Question


@dataclass(frozen=True)
class QuestionsRepository:
    async def list_questions(
        self, session: AsyncSession, *, limit: int, offset: int
    ) -> Sequence[Question]:
        stmt = (
            sa.select(Question)
            .order_by(Question.created_at.desc(), Question.id.desc())
            .limit(limit)
            .offset(offset)
        )
        res = await session.execute(stmt)
        return res.scalars().all()

    async def count_questions(self, session: AsyncSession) -> int:
        res = await session.execute(sa.select(sa.func.count()).select_from(Question))
        return int(res.scalar_one())

    async def get_question(
        self, session: AsyncSession, *, question_id: int
    ) -> Question | None:
        stmt = sa.select(Question).where(Question.id == question_id)
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def insert_question(
        self, session: AsyncSession, *, user_id: int, title: str, body: str, tags: str
    ) -> Question:
        q = Question(user_id=user_id, title=title, body=body, tags=tags)
        session.add(q)
        await session.flush()
        await session.refresh(q)
        return q

    async def list_answers(
        self, session: AsyncSession, *, question_id: int
    ) -> Sequence[Answer]:
        stmt = (
            sa.select(Answer)
            .where(Answer.question_id == question_id)
            .order_by(Answer.created_at.asc(), Answer.id.asc())
        )
        res = await session.execute(stmt)
        return res.scalars().all()

    async def get_answer(
        self, session: AsyncSession, *, question_id: int, answer_id: int
    ) -> Answer | None:
        stmt = sa.select(Answer).where(
            Answer.id == answer_id, Answer.question_id == question_id
        )
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def insert_answer(
        self, session: AsyncSession, *, user_id: int, question_id: int, body: str
    ) -> Answer:
        a = Answer(user_id=user_id, question_id=question_id, body=body)
        session.add(a)
        await session.flush()
        await session.refresh(a)
        return a
