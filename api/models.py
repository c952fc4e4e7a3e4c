"""
API request and response models for AccessGate REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are kept
separate from the dataclasses in auth/models.py, which own the internal
domain representation. Route handlers map between the two.

Field names are camelCase on the wire (fullName, lastLoginAt, ...) via an
alias generator; Python code uses snake_case.

Request models deliberately accept plain strings: the shape rules for email,
password and full name live in auth/validation.py so every caller of the core
gets the same checks and the same field-level messages.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth.models import Role, SafeAccount, Status


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SignupRequest(_CamelModel):
    """Request body for POST /api/v1/auth/signup."""

    email: str = Field(max_length=320)
    password: str = Field(max_length=1024)
    full_name: str = Field(max_length=1024)


class LoginRequest(_CamelModel):
    """Request body for POST /api/v1/auth/login."""

    email: str = Field(max_length=320)
    password: str = Field(min_length=1, max_length=1024)


class ProfileUpdate(_CamelModel):
    """Request body for PUT /api/v1/users/profile. At least one field."""

    email: Optional[str] = Field(default=None, max_length=320)
    full_name: Optional[str] = Field(default=None, max_length=1024)


class ChangePasswordRequest(_CamelModel):
    """Request body for PUT /api/v1/users/change-password."""

    current_password: str = Field(min_length=1, max_length=1024)
    new_password: str = Field(max_length=1024)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class AccountResponse(_CamelModel):
    """Safe account view. The credential hash has no field here by construction."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    email: str
    full_name: str
    role: Role
    status: Status
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    @classmethod
    def from_safe(cls, account: SafeAccount) -> "AccountResponse":
        return cls(
            id=account.id,
            email=account.email,
            full_name=account.full_name,
            role=account.role,
            status=account.status,
            created_at=account.created_at,
            updated_at=account.updated_at,
            last_login_at=account.last_login_at,
        )


class AccountListResponse(_CamelModel):
    """Response for GET /api/v1/admin/users: one window of accounts, newest first."""

    users: list[AccountResponse]
    total: int
    limit: int
    offset: int


class AuthResponse(_CamelModel):
    """Response for signup and login."""

    account: AccountResponse
    token: str
    token_type: str = "bearer"
    expires_in: int


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------


class FieldErrorDetail(BaseModel):
    field: str
    message: str


class ErrorDetail(BaseModel):
    code: str
    message: str
    errors: Optional[list[FieldErrorDetail]] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail
