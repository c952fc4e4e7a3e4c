"""
auth/errors.py -- Error kinds raised by the auth core.

Every error carries a stable machine-checkable `code` plus a human-readable
message. The HTTP status mapping lives in api/errors.py, not here: the core
knows nothing about transports.

Hierarchy:
  AuthError
    ValidationError            -- field-level shape failures (field_errors)
    DuplicateAccountError      -- email already registered
    InvalidCredentialsError    -- deliberately generic login failure
    AccountInactiveError       -- login against a deactivated account
    UnauthenticatedError       -- missing/invalid/expired token, vanished account
      TokenExpiredError
      TokenInvalidError
    ForbiddenError             -- role mismatch or deactivated mid-session
    SelfActionForbiddenError   -- admin acting on their own account
    InvalidStateError          -- redundant activate/deactivate, no change made
    NotFoundError
    ConfigurationError         -- fatal, raised at startup rather than per request

Layer rule: stdlib only.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """One per-field validation message."""

    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class AuthError(Exception):
    """Base class for every error kind raised by the auth core."""

    code: str = "auth_error"
    default_message: str = "Authentication error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    code = "validation_error"
    default_message = "Validation failed"

    def __init__(self, field_errors: list[FieldError] | None = None, message: str | None = None) -> None:
        super().__init__(message)
        self.field_errors: list[FieldError] = list(field_errors or [])

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls([FieldError(field, message)])


class DuplicateAccountError(AuthError):
    code = "duplicate_account"
    default_message = "Email already registered"


class InvalidCredentialsError(AuthError):
    # Same message for unknown email and wrong password so responses cannot
    # be used to enumerate accounts.
    code = "invalid_credentials"
    default_message = "Invalid email or password"


class AccountInactiveError(AuthError):
    code = "account_inactive"
    default_message = "Your account has been deactivated. Please contact support."


class UnauthenticatedError(AuthError):
    code = "unauthenticated"
    default_message = "Authentication required. Please log in."


class TokenExpiredError(UnauthenticatedError):
    code = "token_expired"
    default_message = "Token has expired"


class TokenInvalidError(UnauthenticatedError):
    code = "token_invalid"
    default_message = "Invalid token"


class ForbiddenError(AuthError):
    code = "forbidden"
    default_message = "You do not have permission to perform this action."


class SelfActionForbiddenError(AuthError):
    code = "self_action_forbidden"
    default_message = "You cannot deactivate your own account"


class InvalidStateError(AuthError):
    code = "invalid_state"
    default_message = "No change occurred."


class NotFoundError(AuthError):
    code = "not_found"
    default_message = "User not found"


class ConfigurationError(AuthError):
    code = "configuration_error"
    default_message = "Auth core is misconfigured."
