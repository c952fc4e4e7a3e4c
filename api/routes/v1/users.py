"""
api/routes/v1/users.py -- Self-service profile endpoints.

Routes (all require auth):
  GET /api/v1/users/profile          -- own safe account view
  PUT /api/v1/users/profile          -- change email and/or full name
  PUT /api/v1/users/change-password  -- replace password after re-checking the current one
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import AccountResponse, ChangePasswordRequest, MessageResponse, ProfileUpdate
from auth.dependencies import get_current_account
from auth.models import Account
from auth.service import AuthenticationFlow

router = APIRouter(dependencies=[Depends(get_current_account)])


@router.get("/users/profile", response_model=AccountResponse)
def get_profile(current: Account = Depends(get_current_account)) -> AccountResponse:
    return AccountResponse.from_safe(current.safe_view())


@router.put("/users/profile", response_model=AccountResponse)
def update_profile(
    request: Request,
    body: ProfileUpdate,
    current: Account = Depends(get_current_account),
) -> AccountResponse:
    """Update email and/or full name. A new email must not belong to another account."""
    flow: AuthenticationFlow = request.app.state.auth_flow
    updated = flow.update_profile(current.id, email=body.email, full_name=body.full_name)
    return AccountResponse.from_safe(updated.safe_view())


@router.put("/users/change-password", response_model=MessageResponse)
def change_password(
    request: Request,
    body: ChangePasswordRequest,
    current: Account = Depends(get_current_account),
) -> MessageResponse:
    flow: AuthenticationFlow = request.app.state.auth_flow
    flow.change_password(current.id, body.current_password, body.new_password)
    return MessageResponse(message="Password changed successfully")
