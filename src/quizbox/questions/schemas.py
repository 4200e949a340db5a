from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class QuestionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1, max_length=20_000)
    tags: str = Field(default="", max_length=255)


class AnswerCreate(BaseModel):
    body: str = Field(min_length=1, max_length=20_000)


class AnswerPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    question_id: int
    body: str
    created_at: datetime
    updated_at: datetime | None = None


class QuestionPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    body: str
    tags: str
    created_at: datetime
    updated_at: datetime | None = None


class QuestionDetail(QuestionPublic):
    answers: list[AnswerPublic] = Field(default_factory=list)
