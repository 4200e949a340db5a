from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from quizbox.commons.logging import logger
from quizbox.questions.exceptions import (
    QuestionsServiceNotFoundException,
    QuestionsServiceUnprocessableException,
)
from quizbox.questions.models import Answer, Question
from quizbox.questions.repository import QuestionsRepository


@dataclass
class QuestionsService:
    repo: QuestionsRepository

    @classmethod
    def create(cls) -> "QuestionsService":
        return cls(repo=QuestionsRepository())

    async def list_questions(
        self, session: AsyncSession, *, limit: int, offset: int
    ) -> tuple[Sequence[Question], int]:
        questions = await self.repo.list_questions(session, limit=limit, offset=offset)
        return questions, await self.repo.count_questions(session)

    async def get_question(
        self, session: AsyncSession, *, question_id: int
    ) -> tuple[Question, Sequence[Answer]]:
        question = await self.repo.get_question(session, question_id=question_id)
        if question is None:
            raise QuestionsServiceNotFoundException("question not found")
        answers = await self.repo.list_answers(session, question_id=question_id)
        return question, answers

    async def ask(
        self, session: AsyncSession, *, user_id: int, title: str, body: str, tags: str
    ) -> Question:
        errors: list[str] = []
        if not title.strip():
            errors.append("title cannot be empty")
        if not body.strip():
            errors.append("body cannot be empty")
        if errors:
            raise QuestionsServiceUnprocessableException(
                "could not save question", ", ".join(errors)
            )

        question = await self.repo.insert_question(
            session, user_id=user_id, title=title.strip(), body=body.strip(), tags=tags.strip()
        )
        await session.commit()
        logger.info("user_id=%s asked question_id=%s", user_id, question.id)
        return question

    async def answer(
        self, session: AsyncSession, *, user_id: int, question_id: int, body: str
    ) -> Answer:
        if not body.strip():
            raise QuestionsServiceUnprocessableException(
                "could not save answer", "body cannot be empty"
            )
        question = await self.repo.get_question(session, question_id=question_id)
        if question is None:
            raise QuestionsServiceNotFoundException("question not found")

        answer = await self.repo.insert_answer(
            session, user_id=user_id, question_id=question_id, body=body.strip()
        )
        await session.commit()
        return answer
