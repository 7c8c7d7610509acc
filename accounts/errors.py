"""
Domain errors raised by the account services.

Services raise these and never HTTP exceptions; the API layer maps each
class to a status code and the standard error envelope.
"""

from typing import Optional


class AccountError(Exception):
    """Base class for account and authentication failures."""

    status_code = 500
    default_code = "ACCOUNT_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class ValidationError(AccountError):
    """Malformed, missing or mismatched input."""

    status_code = 400
    default_code = "VALIDATION_ERROR"


class AuthenticationError(AccountError):
    """Bad credentials, token or OTP code. Messages stay uniform."""

    status_code = 401
    default_code = "AUTHENTICATION_FAILED"


class NotFoundError(AccountError):
    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(AccountError):
    """Uniqueness violation on an account field."""

    status_code = 409
    default_code = "CONFLICT"

    def __init__(self, message: str, field: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message, code)
        self.field = field


class ExpiredError(AccountError):
    """A time-bound resource (OTP challenge) has lapsed."""

    status_code = 400
    default_code = "EXPIRED"


class InternalError(AccountError):
    status_code = 500
    default_code = "INTERNAL_ERROR"
