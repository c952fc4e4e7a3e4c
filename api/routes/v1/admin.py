"""
api/routes/v1/admin.py -- Admin account lifecycle endpoints.

Routes (all require auth + admin role):
  GET   /api/v1/admin/users                  -- accounts newest first (?limit=&offset=)
  GET   /api/v1/admin/users/{id}             -- safe view of one account
  PATCH /api/v1/admin/users/{id}/activate    -- inactive -> active
  PATCH /api/v1/admin/users/{id}/deactivate  -- active -> inactive

[M4] An admin cannot deactivate their own account (SelfActionForbiddenError).
Repeating a transition returns 400 invalid_state and changes nothing.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from api.models import AccountListResponse, AccountResponse
from auth.dependencies import require_admin
from auth.lifecycle import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, AccountLifecycle
from auth.models import Account

# The role set is fixed here, once, for every route on this router.
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/admin/users", response_model=AccountListResponse)
def list_users(
    request: Request,
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
) -> AccountListResponse:
    lifecycle: AccountLifecycle = request.app.state.lifecycle
    accounts, total = lifecycle.list_accounts(limit=limit, offset=offset)
    return AccountListResponse(
        users=[AccountResponse.from_safe(a) for a in accounts],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/admin/users/{account_id}", response_model=AccountResponse)
def get_user(request: Request, account_id: str) -> AccountResponse:
    lifecycle: AccountLifecycle = request.app.state.lifecycle
    return AccountResponse.from_safe(lifecycle.get_account(account_id))


@router.patch("/admin/users/{account_id}/activate", response_model=AccountResponse)
def activate_user(request: Request, account_id: str) -> AccountResponse:
    lifecycle: AccountLifecycle = request.app.state.lifecycle
    return AccountResponse.from_safe(lifecycle.activate(account_id))


@router.patch("/admin/users/{account_id}/deactivate", response_model=AccountResponse)
def deactivate_user(
    request: Request,
    account_id: str,
    admin: Account = Depends(require_admin),
) -> AccountResponse:
    lifecycle: AccountLifecycle = request.app.state.lifecycle
    return AccountResponse.from_safe(lifecycle.deactivate(account_id, acting_admin_id=admin.id))
