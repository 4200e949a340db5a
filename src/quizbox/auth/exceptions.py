from __future__ import annotations

from quizbox.commons.exceptions import (
    BaseCoreException,
    BaseServiceConflictException,
    BaseServiceNotFoundException,
    BaseServiceUnauthorizedException,
    BaseServiceUnProcessableException,
)


class AuthServiceNotFoundException(BaseServiceNotFoundException):
    pass


class AuthServiceUnprocessableException(BaseServiceUnProcessableException):
    pass


class AuthServiceConflictException(BaseServiceConflictException):
    pass


class AuthServiceUnauthorizedException(BaseServiceUnauthorizedException):
    pass


# Password hashing


class MalformedHashException(BaseCoreException):
    pass


class PasswordMismatchException(AuthServiceUnauthorizedException):
    pass


# Tokens


class InvalidTokenException(AuthServiceUnauthorizedException):
    pass


class TokenNotProvidedException(AuthServiceUnauthorizedException):
    pass


class InvalidSignatureException(InvalidTokenException):
    pass


class MalformedTokenException(InvalidTokenException):
    pass


class TokenExpiredException(InvalidTokenException):
    pass


# Session lifecycle


class SessionDeactivatedException(AuthServiceUnauthorizedException):
    pass


class UserInactiveException(AuthServiceUnauthorizedException):
    pass


class UserUnverifiedException(AuthServiceUnauthorizedException):
    pass
