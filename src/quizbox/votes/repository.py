from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from dataclasses import dataclass

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from quizbox.votes.models import Vote, VoteKind, VoteMode


@dataclass(frozen=True)
class VotesRepository:
    async def get_by_user_and_target(
        self, session: AsyncSession, *, user_id: int, kind: VoteKind, kind_id: int
    ) -> Vote | None:
        stmt = sa.select(Vote).where(
            Vote.user_id == user_id, Vote.kind == kind, Vote.kind_id == kind_id
        )
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def insert_vote(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        kind: VoteKind,
        kind_id: int,
        mode: VoteMode,
    ) -> Vote:
        vote = Vote(user_id=user_id, kind=kind, kind_id=kind_id, mode=mode)
        session.add(vote)
        await session.flush()
        await session.refresh(vote)
        return vote

    async def update_mode(
        self, session: AsyncSession, *, vote: Vote, mode: VoteMode, now: dt.datetime
    ) -> Vote:
        vote.mode = mode
        vote.updated_at = now
        await session.flush()
        return vote

    async def count_votes(
        self, session: AsyncSession, *, kind: VoteKind, kind_ids: Sequence[int]
    ) -> dict[tuple[int, VoteMode], int]:
        if not kind_ids:
            return {}
        stmt = (
            sa.select(Vote.kind_id, Vote.mode, sa.func.count(Vote.id))
            .where(Vote.kind == kind, Vote.kind_id.in_(kind_ids))
            .group_by(Vote.kind_id, Vote.mode)
        )
        res = await session.execute(stmt)
        return {(kind_id, mode): int(n) for kind_id, mode, n in res.all()}
