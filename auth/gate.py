"""
auth/gate.py -- Request-time authorization: protect + restrict_to.

Two independently composable checks, applied in order by the transport:

  protect(authorization_header) -> Account
      Unauthenticated -> Authenticated. Needs a present, valid, unexpired
      bearer token AND a live account. The account is re-read from the store
      on every request: the token's cached role/email are never trusted for
      liveness, so a deactivation takes effect on the very next request even
      though the token itself stays valid until exp.

  RoleGate(allowed).check(account) -> Account
      Authenticated -> Authorized. A pure function of (account, allowed set).
      The allowed set is fixed when the gate is built, typically once per route.

Any failed transition ends the request at that stage; nothing is retried.

Layer rule: no imports from api/. The FastAPI glue lives in auth/dependencies.py.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from auth.errors import ForbiddenError, UnauthenticatedError
from auth.models import Account, Role
from auth.store import AccountStore
from auth.tokens import TokenService

logger = logging.getLogger("accessgate.auth.gate")

_BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an `Authorization: Bearer <token>` value, or None."""
    if not authorization:
        return None
    if authorization[: len(_BEARER_PREFIX)].lower() != _BEARER_PREFIX:
        return None
    token = authorization[len(_BEARER_PREFIX) :].strip()
    return token or None


class AuthorizationGate:
    def __init__(self, tokens: TokenService, store: AccountStore) -> None:
        self.tokens = tokens
        self.store = store

    def protect(self, authorization: str | None) -> Account:
        """Authenticate a request from its Authorization header value.

        Raises:
            UnauthenticatedError: no token; or TokenExpiredError /
                TokenInvalidError (both UnauthenticatedError subclasses);
                or the account behind the token no longer exists.
            ForbiddenError: the account has been deactivated.
        """
        token = extract_bearer_token(authorization)
        if token is None:
            raise UnauthenticatedError()

        claims = self.tokens.verify(token)

        account = self.store.get_by_id(claims.account_id)
        if account is None:
            logger.warning("Token for missing account id=%s", claims.account_id)
            raise UnauthenticatedError("User no longer exists.")
        if not account.is_active:
            logger.warning("Token for deactivated account id=%s", account.id)
            raise ForbiddenError("Your account has been deactivated. Please contact support.")
        return account


class RoleGate:
    """Allow only accounts whose role is in a fixed set.

    Usage:
        admin_only = restrict_to("admin")
        admin_only.check(account)
    """

    def __init__(self, allowed: Iterable[Role | str]) -> None:
        # Role() rejects unknown names with ValueError at construction time.
        self.allowed: frozenset[Role] = frozenset(Role(r) for r in allowed)
        if not self.allowed:
            raise ValueError("RoleGate needs at least one allowed role")

    def check(self, account: Account | None) -> Account:
        if account is None:
            raise UnauthenticatedError("Authentication required.")
        if account.role not in self.allowed:
            logger.warning("Role %s denied (allowed: %s) id=%s", account.role.value, self._names(), account.id)
            raise ForbiddenError()
        return account

    def _names(self) -> str:
        return ",".join(sorted(r.value for r in self.allowed))

    def __repr__(self) -> str:
        return f"RoleGate({self._names()})"


def restrict_to(*roles: Role | str) -> RoleGate:
    return RoleGate(roles)
