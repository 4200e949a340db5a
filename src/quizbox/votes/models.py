from __future__ import annotations

import datetime as dt
import enum

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.orm import Mapped, mapped_column  # type: ignore[import-not-found]

from quizbox.auth.models import Base
from quizbox.commons.ids import BigIntId


class VoteKind(str, enum.Enum):
    QUESTION = "question"
    ANSWER = "answer"


class VoteMode(str, enum.Enum):
    UP = "up"
    DOWN = "down"


def _str_enum(cls: type[enum.Enum], name: str) -> sa.Enum:
    return sa.Enum(
        cls, name=name, native_enum=False, values_callable=lambda e: [m.value for m in e]
    )


class Vote(Base):
    __tablename__ = "votes"
    # One vote per user per target; voting again changes the mode.
    __table_args__ = (
        sa.UniqueConstraint("user_id", "kind", "kind_id", name="votes_user_target_uidx"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigIntId, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[VoteKind] = mapped_column(_str_enum(VoteKind, "vote_kind"), nullable=False)
    kind_id: Mapped[int] = mapped_column(BigIntId, nullable=False)
    mode: Mapped[VoteMode] = mapped_column(_str_enum(VoteMode, "vote_mode"), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
    updated_at: Mapped[dt.datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
