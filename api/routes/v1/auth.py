"""
api/routes/v1/auth.py -- Signup, login and session endpoints.

Routes:
  POST /api/v1/auth/signup   -- create a `user` account; returns account + token (201)
  POST /api/v1/auth/login    -- password login; returns account + token
  GET  /api/v1/auth/me       -- current account (requires auth)
  POST /api/v1/auth/logout   -- acknowledges logout (requires auth)

Security:
  [C1] AuthenticationFlow.login() provides timing equalization -- use it, never inline.
  [M5] Cache-Control: no-store on responses that carry a token.
  Logout is client-side: tokens have no revocation list and stay valid until exp.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import AccountResponse, AuthResponse, LoginRequest, MessageResponse, SignupRequest
from auth.dependencies import get_current_account
from auth.models import Account, AuthResult
from auth.service import AuthenticationFlow

# Auth policy:
# - POST /api/v1/auth/signup:  public
# - POST /api/v1/auth/login:   public
# - GET  /api/v1/auth/me:      requires auth (get_current_account)
# - POST /api/v1/auth/logout:  requires auth (get_current_account)
router = APIRouter()


def _token_response(request: Request, result: AuthResult, status_code: int) -> JSONResponse:
    body = AuthResponse(
        account=AccountResponse.from_safe(result.account),
        token=result.token,
        expires_in=request.app.state.tokens.config.expire_seconds,
    )
    resp = JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.post("/auth/signup", response_model=AuthResponse, status_code=201)
def signup(request: Request, body: SignupRequest) -> JSONResponse:
    """Register a new account with role `user` and status `active`."""
    flow: AuthenticationFlow = request.app.state.auth_flow
    result = flow.signup(body.email, body.password, body.full_name)
    return _token_response(request, result, 201)


@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password.

    Unknown email and wrong password return the same 401 body so responses
    cannot be used to enumerate accounts.
    """
    flow: AuthenticationFlow = request.app.state.auth_flow
    result = flow.login(body.email, body.password)
    return _token_response(request, result, 200)


@router.get("/auth/me", response_model=AccountResponse)
def me(current: Account = Depends(get_current_account)) -> AccountResponse:
    """Return the safe view of the currently authenticated account."""
    return AccountResponse.from_safe(current.safe_view())


@router.post("/auth/logout", response_model=MessageResponse)
def logout(current: Account = Depends(get_current_account)) -> MessageResponse:
    """Acknowledge logout. The client is responsible for discarding its token."""
    return MessageResponse(message="Logged out successfully.")
