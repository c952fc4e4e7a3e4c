"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, almost zero logic). The store owns
persistence, the services own the rules; these classes only own shape.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    admin = "admin"
    user = "user"


class Status(str, Enum):
    active = "active"
    inactive = "inactive"


def normalize_email(email: str) -> str:
    """Canonical form used as the login key: trimmed and lower-cased."""
    return email.strip().lower()


@dataclass(frozen=True)
class Account:
    """A persisted account record.

    credential_hash is the bcrypt hash of the current password. It must never
    leave the core -- callers outside auth/ get safe_view() instead.
    """

    id: str
    email: str
    credential_hash: str
    full_name: str
    role: Role = Role.user
    status: Status = Status.active
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_login_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status is Status.active

    def safe_view(self) -> SafeAccount:
        return SafeAccount(
            id=self.id,
            email=self.email,
            full_name=self.full_name,
            role=self.role,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
            last_login_at=self.last_login_at,
        )


@dataclass(frozen=True)
class SafeAccount:
    """Projection of Account with the credential hash stripped."""

    id: str
    email: str
    full_name: str
    role: Role
    status: Status
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_login_at: datetime | None = None


@dataclass(frozen=True)
class TokenClaims:
    """The minimal identity carried inside a signed token."""

    account_id: str
    email: str
    role: Role

    @classmethod
    def for_account(cls, account: Account) -> TokenClaims:
        return cls(account_id=account.id, email=account.email, role=account.role)


@dataclass(frozen=True)
class AuthResult:
    """Returned by signup and login: safe account view plus a fresh token."""

    account: SafeAccount
    token: str
