from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Shape of every JSON body the API returns."""

    success: bool = True
    message: str | None = None
    data: T | None = None


class Pagination(BaseModel):
    count: int
    page: int
    per: int
    num_pages: int

    @classmethod
    def build(cls, count: int, page: int, per: int) -> "Pagination":
        return cls(count=count, page=page, per=per, num_pages=-(-count // per))


class Page(BaseModel, Generic[T]):
    items: list[T]
    pagination: Pagination
