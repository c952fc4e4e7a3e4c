"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

get_current_account() runs AuthorizationGate.protect() against the request's
Authorization header and attaches the resolved account to request.state.
require_roles(...) builds a dependency that runs protect first and then a
RoleGate fixed at route-registration time.

Errors are not turned into HTTPException here: the gate raises the auth
core's own error kinds and api/errors.py maps them to status codes.

Layer rule: no imports from api/.
  auth/dependencies.py may import from fastapi (for Depends/Request) because
  this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Depends, Request

from auth.gate import AuthorizationGate, RoleGate
from auth.models import Account, Role


def get_current_account(request: Request) -> Account:
    """Require authentication (protect).

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(account: Account = Depends(get_current_account)): ...
    """
    gate: AuthorizationGate = request.app.state.gate
    account = gate.protect(request.headers.get("Authorization"))
    request.state.account = account
    return account


class RoleRequirement:
    """Dependency callable: protect, then restrict to a fixed role set."""

    def __init__(self, gate: RoleGate) -> None:
        self.gate = gate

    def __call__(self, account: Account = Depends(get_current_account)) -> Account:
        return self.gate.check(account)


def require_roles(*roles: Role | str) -> RoleRequirement:
    """Build a dependency allowing only the given roles.

    Use once per route or router:
        @router.patch("/admin/...", dependencies=[Depends(require_roles("admin"))])
    """
    return RoleRequirement(RoleGate(roles))


require_admin = require_roles(Role.admin)
