from __future__ import annotations

from quizbox.commons.exceptions import BaseServiceForbiddenException


class UsersServiceForbiddenException(BaseServiceForbiddenException):
    pass
