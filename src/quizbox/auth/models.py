from __future__ import annotations

import datetime as dt
import enum

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column  # type: ignore[import-not-found]

from quizbox.commons.ids import BigIntId


class Base(DeclarativeBase):
    pass


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    UNVERIFIED = "unverified"

    @property
    def is_active(self) -> bool:
        return self is UserStatus.ACTIVE

    @property
    def is_unverified(self) -> bool:
        return self is UserStatus.UNVERIFIED


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(sa.Text(), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(sa.Text(), nullable=False, default="")
    email: Mapped[str] = mapped_column(sa.Text(), nullable=False, unique=True)
    status: Mapped[UserStatus] = mapped_column(
        sa.Enum(
            UserStatus,
            name="user_status",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=UserStatus.UNVERIFIED,
    )
    password_hash: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    email_verified: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, default=False
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
    updated_at: Mapped[dt.datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )


class Session(Base):
    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigIntId, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    deactivated_at: Mapped[dt.datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    expires_at: Mapped[dt.datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    ip_address: Mapped[str] = mapped_column(sa.Text(), nullable=False, default="")
    last_refreshed_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False
    )
    user_agent: Mapped[str] = mapped_column(sa.Text(), nullable=False, default="")
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
    updated_at: Mapped[dt.datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
