"""
auth/validation.py -- Shape rules for credentials and profile fields.

Only the rules the auth core depends on live here: email shape, password
strength, full-name length. Every check collects all field messages before
raising, so a caller sees every problem in one ValidationError.
"""

from __future__ import annotations

import re

from auth.errors import FieldError, ValidationError

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
FULL_NAME_MIN_LENGTH = 2
FULL_NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 254

# Deliberately loose: one @, no whitespace, a dot in the domain part.
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ASCII classes only: accented capitals, non-Latin digits and superscripts do not count.
_UPPER_RE = re.compile(r"[A-Z]")
_LOWER_RE = re.compile(r"[a-z]")
_DIGIT_RE = re.compile(r"[0-9]")


def password_errors(password: str, field: str = "password", label: str = "Password") -> list[FieldError]:
    """Collect shape errors for a password. label prefixes every message."""
    errors: list[FieldError] = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(FieldError(field, f"{label} must be at least {PASSWORD_MIN_LENGTH} characters"))
    elif len(password) > PASSWORD_MAX_LENGTH:
        errors.append(FieldError(field, f"{label} cannot exceed {PASSWORD_MAX_LENGTH} characters"))
    if not (_UPPER_RE.search(password) and _LOWER_RE.search(password) and _DIGIT_RE.search(password)):
        errors.append(
            FieldError(
                field,
                f"{label} must contain at least one uppercase letter, one lowercase letter, and one number",
            )
        )
    return errors


def email_errors(email: str, field: str = "email") -> list[FieldError]:
    """email is expected to be normalized already."""
    if not email:
        return [FieldError(field, "Email is required")]
    if len(email) > EMAIL_MAX_LENGTH or not _EMAIL_RE.match(email):
        return [FieldError(field, "Please provide a valid email address")]
    return []


def full_name_errors(full_name: str, field: str = "fullName") -> list[FieldError]:
    name = full_name.strip()
    if len(name) < FULL_NAME_MIN_LENGTH:
        return [FieldError(field, f"Full name must be at least {FULL_NAME_MIN_LENGTH} characters")]
    if len(name) > FULL_NAME_MAX_LENGTH:
        return [FieldError(field, f"Full name cannot exceed {FULL_NAME_MAX_LENGTH} characters")]
    return []


def raise_if_any(errors: list[FieldError]) -> None:
    if errors:
        raise ValidationError(errors)


def validate_password(password: str, field: str = "password") -> None:
    raise_if_any(password_errors(password, field))
