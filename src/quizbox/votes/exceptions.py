from __future__ import annotations

from quizbox.commons.exceptions import (
    BaseServiceConflictException,
    BaseServiceNotFoundException,
)


class VotesServiceNotFoundException(BaseServiceNotFoundException):
    pass


class VotesServiceConflictException(BaseServiceConflictException):
    pass
