"""
Domain errors raised by the auth and expense services.

Each error carries the HTTP status the API layer answers with; see
``api.errors`` for the mapping into response bodies.
"""

from __future__ import annotations


class MoveBudgetError(Exception):
    """Base class for every error surfaced to API callers."""

    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateUsernameError(MoveBudgetError):
    status_code = 400
    default_message = "Username already exists"


class InvalidCredentialsError(MoveBudgetError):
    status_code = 401
    default_message = "Invalid username or password"


class InvalidOrExpiredTokenError(MoveBudgetError):
    status_code = 401
    default_message = "Invalid or expired refresh token"


class InvalidAccessTokenError(MoveBudgetError):
    status_code = 401
    default_message = "Invalid or expired access token"


class NotFoundError(MoveBudgetError):
    status_code = 404
    default_message = "Expense not found"


class ConversionFailedError(MoveBudgetError):
    status_code = 400
    default_message = "Currency conversion failed"


class ValidationFailedError(MoveBudgetError):
    status_code = 400
    default_message = "Validation failed"
