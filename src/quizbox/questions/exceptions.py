from __future__ import annotations

from quizbox.commons.exceptions import (
    BaseServiceNotFoundException,
    BaseServiceUnProcessableException,
)


class QuestionsServiceNotFoundException(BaseServiceNotFoundException):
    pass


class QuestionsServiceUnprocessableException(BaseServiceUnProcessableException):
    pass
