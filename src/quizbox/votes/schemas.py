from __future__ import annotations

from pydantic import BaseModel, Field, computed_field

from quizbox.votes.models import VoteMode


class VoteCreate(BaseModel):
    mode: VoteMode


class VoteTally(BaseModel):
    up: int = 0
    down: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def score(self) -> int:
        return self.up - self.down


class AnswerVotes(BaseModel):
    answer_id: int
    votes: VoteTally


class QuestionVotes(BaseModel):
    question_id: int
    votes: VoteTally
    answers: list[AnswerVotes] = Field(default_factory=list)
