from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from quizbox.commons.logging import logger
from quizbox.questions.repository import QuestionsRepository
from quizbox.votes.exceptions import (
    VotesServiceConflictException,
    VotesServiceNotFoundException,
)
from quizbox.votes.models import VoteKind, VoteMode
from quizbox.votes.repository import VotesRepository
from quizbox.votes.schemas import AnswerVotes, QuestionVotes, VoteTally


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


@dataclass
class VotesService:
    repo: VotesRepository
    questions: QuestionsRepository

    @classmethod
    def create(cls) -> "VotesService":
        return cls(repo=VotesRepository(), questions=QuestionsRepository())

    async def _ensure_target(
        self, session: AsyncSession, *, question_id: int, answer_id: int | None
    ) -> tuple[VoteKind, int]:
        question = await self.questions.get_question(session, question_id=question_id)
        if question is None:
            raise VotesServiceNotFoundException("question not found")
        if answer_id is None:
            return VoteKind.QUESTION, question.id
        answer = await self.questions.get_answer(
            session, question_id=question_id, answer_id=answer_id
        )
        if answer is None:
            raise VotesServiceNotFoundException("answer not found")
        return VoteKind.ANSWER, answer.id

    async def cast(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        question_id: int,
        answer_id: int | None = None,
        mode: VoteMode,
    ) -> VoteTally:
        """Record the user's vote on a question or one of its answers.

        A second vote on the same target replaces the first one's mode.
        """
        kind, kind_id = await self._ensure_target(
            session, question_id=question_id, answer_id=answer_id
        )

        existing = await self.repo.get_by_user_and_target(
            session, user_id=user_id, kind=kind, kind_id=kind_id
        )
        try:
            if existing is None:
                await self.repo.insert_vote(
                    session, user_id=user_id, kind=kind, kind_id=kind_id, mode=mode
                )
            elif existing.mode is not mode:
                await self.repo.update_mode(session, vote=existing, mode=mode, now=_utcnow())
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            raise VotesServiceConflictException(
                "could not save vote", "vote was recorded concurrently, try again"
            ) from exc

        logger.info("user_id=%s voted %s on %s_id=%s", user_id, mode.value, kind.value, kind_id)
        tallies = await self.tallies(session, kind=kind, kind_ids=[kind_id])
        return tallies[kind_id]

    async def tallies(
        self, session: AsyncSession, *, kind: VoteKind, kind_ids: Sequence[int]
    ) -> dict[int, VoteTally]:
        counts = await self.repo.count_votes(session, kind=kind, kind_ids=kind_ids)
        return {
            kind_id: VoteTally(
                up=counts.get((kind_id, VoteMode.UP), 0),
                down=counts.get((kind_id, VoteMode.DOWN), 0),
            )
            for kind_id in kind_ids
        }

    async def question_votes(
        self, session: AsyncSession, *, question_id: int
    ) -> QuestionVotes:
        await self._ensure_target(session, question_id=question_id, answer_id=None)
        answers = await self.questions.list_answers(session, question_id=question_id)
        question_tally = await self.tallies(
            session, kind=VoteKind.QUESTION, kind_ids=[question_id]
        )
        answer_tallies = await self.tallies(
            session, kind=VoteKind.ANSWER, kind_ids=[a.id for a in answers]
        )
        return QuestionVotes(
            question_id=question_id,
            votes=question_tally[question_id],
            answers=[
                AnswerVotes(answer_id=a.id, votes=answer_tallies[a.id]) for a in answers
            ],
        )
