"""
auth/lifecycle.py -- Admin-driven account activation and deactivation.

Transition rules are pure functions (plan_activation / plan_deactivation)
that take an Account and return the updated copy or raise. AccountLifecycle
wires them to the store. Repeating a transition is an explicit error
(InvalidStateError), never a silent no-op: callers treat it as "no change".

Deactivation check order:
  1. account exists                 -> NotFoundError
  2. target is not the acting admin -> SelfActionForbiddenError
  3. target is not already inactive -> InvalidStateError
"""

from __future__ import annotations

import logging
from dataclasses import replace

from auth.errors import FieldError, InvalidStateError, NotFoundError, SelfActionForbiddenError, ValidationError
from auth.models import Account, SafeAccount, Status
from auth.store import AccountStore

logger = logging.getLogger("accessgate.auth.lifecycle")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


# ---------------------------------------------------------------------------
# Pure transition rules
# ---------------------------------------------------------------------------


def plan_activation(account: Account) -> Account:
    if account.status is Status.active:
        raise InvalidStateError("User is already active")
    return replace(account, status=Status.active)


def plan_deactivation(account: Account, acting_admin_id: str) -> Account:
    # Identifiers are compared in canonical string form.
    if str(account.id) == str(acting_admin_id):
        raise SelfActionForbiddenError()
    if account.status is Status.inactive:
        raise InvalidStateError("User is already inactive")
    return replace(account, status=Status.inactive)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class AccountLifecycle:
    def __init__(self, store: AccountStore) -> None:
        self.store = store

    def get_account(self, account_id: str) -> SafeAccount:
        return self._load(account_id).safe_view()

    def list_accounts(self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> tuple[list[SafeAccount], int]:
        """Return (safe views newest first, total account count)."""
        errors: list[FieldError] = []
        if not 1 <= limit <= MAX_PAGE_SIZE:
            errors.append(FieldError("limit", f"Limit must be between 1 and {MAX_PAGE_SIZE}"))
        if offset < 0:
            errors.append(FieldError("offset", "Offset cannot be negative"))
        if errors:
            raise ValidationError(errors)
        accounts = self.store.list_accounts(limit=limit, offset=offset)
        return [a.safe_view() for a in accounts], self.store.count()

    def activate(self, account_id: str) -> SafeAccount:
        account = self._load(account_id)
        updated = plan_activation(account)
        self._persist(account, updated)
        logger.info("Account activated id=%s", account.id)
        return self._load(account_id).safe_view()

    def deactivate(self, account_id: str, acting_admin_id: str) -> SafeAccount:
        account = self._load(account_id)
        updated = plan_deactivation(account, acting_admin_id)
        self._persist(account, updated)
        logger.info("Account deactivated id=%s by=%s", account.id, acting_admin_id)
        return self._load(account_id).safe_view()

    def _load(self, account_id: str) -> Account:
        account = self.store.get_by_id(account_id)
        if account is None:
            raise NotFoundError()
        return account

    def _persist(self, before: Account, after: Account) -> None:
        # Optimistic write: a concurrent transition that got there first
        # leaves nothing to change.
        if not self.store.update_status(after.id, after.status, expected=before.status):
            raise InvalidStateError(f"User is already {after.status.value}")
