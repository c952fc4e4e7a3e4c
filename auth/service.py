"""
auth/service.py -- Signup, login and self-service profile operations.

AuthenticationFlow orchestrates CredentialHasher, AccountStore and
TokenService. Every operation validates first and writes once, so a failure
never leaves a half-applied change behind.

Login check order:
  1. unknown email        -> InvalidCredentialsError (after a dummy verify [C1])
  2. inactive account     -> AccountInactiveError
  3. wrong password       -> InvalidCredentialsError
The inactive check runs before password verification. That tells a caller
who knows an email whether the account is deactivated, without proving they
know the password. Kept deliberately; see DESIGN.md.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from auth.errors import (
    AccountInactiveError,
    DuplicateAccountError,
    FieldError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from auth.models import Account, AuthResult, Role, normalize_email
from auth.passwords import CredentialHasher
from auth.store import AccountStore
from auth.tokens import TokenService
from auth.validation import email_errors, full_name_errors, password_errors, raise_if_any, validate_password

logger = logging.getLogger("accessgate.auth")


class AuthenticationFlow:
    def __init__(self, store: AccountStore, hasher: CredentialHasher, tokens: TokenService) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens

    # ------------------------------------------------------------------
    # Signup / login
    # ------------------------------------------------------------------

    def signup(self, email: str, password: str, full_name: str) -> AuthResult:
        """Register a new `user` account and issue its first token.

        Raises:
            ValidationError: bad email, full name or password shape.
            DuplicateAccountError: the normalized email is already registered.
        """
        email = normalize_email(email)
        raise_if_any(email_errors(email) + full_name_errors(full_name))
        if self.store.get_by_email(email) is not None:
            raise DuplicateAccountError()
        validate_password(password)

        account = self.store.create_account(
            email=email,
            credential_hash=self.hasher.hash(password),
            full_name=full_name,
            role=Role.user,
        )
        token = self.tokens.issue(self.tokens.claims_for(account))
        logger.info("Account created id=%s", account.id)
        return AuthResult(account=account.safe_view(), token=token)

    def login(self, email: str, password: str) -> AuthResult:
        """Authenticate by email and password, stamp last_login_at, issue a token."""
        account = self.store.get_by_email(email)
        if account is None:
            # Equalize timing -- do NOT return before running bcrypt [C1]
            self.hasher.verify_dummy(password)
            logger.warning("Login failed: unknown email")
            raise InvalidCredentialsError()
        if not account.is_active:
            logger.warning("Login refused for inactive account id=%s", account.id)
            raise AccountInactiveError()
        if not self.hasher.verify(password, account.credential_hash):
            logger.warning("Login failed: bad password for id=%s", account.id)
            raise InvalidCredentialsError()

        token = self.tokens.issue(self.tokens.claims_for(account))
        stamp = self.store.update_last_login(account.id)
        logger.info("Login succeeded id=%s", account.id)
        return AuthResult(account=_with_last_login(account, stamp).safe_view(), token=token)

    # ------------------------------------------------------------------
    # Self-service profile
    # ------------------------------------------------------------------

    def get_profile(self, account_id: str) -> Account:
        account = self.store.get_by_id(account_id)
        if account is None:
            raise NotFoundError()
        return account

    def update_profile(self, account_id: str, email: str | None = None, full_name: str | None = None) -> Account:
        """Change email and/or full name. At least one must be given.

        A new email is normalized, shape-checked and re-checked for uniqueness
        against every other account; the store's unique index still has the
        final word.
        """
        if email is None and full_name is None:
            raise ValidationError(message="At least one field must be provided")
        errors: list[FieldError] = []
        if email is not None:
            email = normalize_email(email)
            errors += email_errors(email)
        if full_name is not None:
            errors += full_name_errors(full_name)
        raise_if_any(errors)

        if self.store.get_by_id(account_id) is None:
            raise NotFoundError()
        if email is not None and self.store.email_taken(email, exclude_id=account_id):
            raise DuplicateAccountError("Email already in use")
        if not self.store.update_profile(account_id, email=email, full_name=full_name):
            raise NotFoundError()
        logger.info("Profile updated id=%s", account_id)
        return self.get_profile(account_id)

    def change_password(self, account_id: str, current_password: str, new_password: str) -> None:
        """Replace the password after re-checking the current one.

        The new password's shape is checked first (ValidationError), then the
        current password (InvalidCredentialsError). Tokens issued before the
        change stay valid until they expire.
        """
        errors = password_errors(new_password, field="newPassword", label="New password")
        if new_password == current_password:
            errors.append(FieldError("newPassword", "New password must be different from current password"))
        raise_if_any(errors)

        account = self.get_profile(account_id)
        if not self.hasher.verify(current_password, account.credential_hash):
            raise InvalidCredentialsError("Current password is incorrect")

        if not self.store.update_password(account_id, self.hasher.hash(new_password)):
            raise NotFoundError()
        logger.info("Password changed id=%s", account_id)


def _with_last_login(account: Account, stamp: datetime) -> Account:
    return replace(account, last_login_at=stamp, updated_at=stamp)
