"""
api/main.py -- FastAPI application entry point for AccessGate.

Exposes the auth core over HTTP. This module is transport glue only: every
rule lives in auth/, and every auth error kind is mapped to a status code in
api/errors.py.

Run with:  uvicorn asgi:app --reload

Lifespan handles startup (settings, account store, core services) and
shutdown (close the store) symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from sqlalchemy import text

from api.errors import register_exception_handlers
from api.models import HealthResponse
from api.routes.v1.admin import router as admin_router
from api.routes.v1.auth import router as auth_router
from api.routes.v1.users import router as users_router
from auth.gate import AuthorizationGate
from auth.lifecycle import AccountLifecycle
from auth.passwords import CredentialHasher
from auth.service import AuthenticationFlow
from auth.store import AccountStore
from auth.tokens import TokenConfig, TokenService
from core.config import Settings, get_settings

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("accessgate.api")


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


def init_services(app: FastAPI, store: AccountStore, settings: Settings) -> None:
    """Build the auth core once and attach it to app.state.

    TokenService gets an explicit TokenConfig here; nothing in auth/ reads
    the environment at call time.
    """
    tokens = TokenService(
        TokenConfig(secret_key=settings.secret_key, expire_seconds=settings.token_expire_seconds)
    )
    hasher = CredentialHasher(rounds=settings.bcrypt_rounds)
    app.state.store = store
    app.state.tokens = tokens
    app.state.auth_flow = AuthenticationFlow(store, hasher, tokens)
    app.state.gate = AuthorizationGate(tokens, store)
    app.state.lifecycle = AccountLifecycle(store)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the account store on startup and close it on shutdown.

    Settings are resolved first: a missing SECRET_KEY outside DEBUG mode
    raises here and the server refuses to start.
    """
    logger.info("AccessGate API starting up")
    settings = get_settings()
    init_services(app, AccountStore(settings.database_url), settings)
    logger.info("Auth initialized (accounts=%d)", app.state.store.count())

    yield

    app.state.store.close()
    logger.info("AccessGate API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="AccessGate API",
    description="Account authentication, bearer tokens, role gating and account lifecycle.",
    version=VERSION,
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Request logging: method, path, status, latency, client.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration and exception handlers
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(users_router, prefix="/api/v1", tags=["Users"])
app.include_router(admin_router, prefix="/api/v1", tags=["Admin"])

register_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health (public, outside the routers)
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", include_in_schema=True, tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and a database round-trip check."""
    components = {"app": "ok", "database": "ok"}
    try:
        with request.app.state.store.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database unreachable")
        components["database"] = "error"
    return HealthResponse(version=VERSION, components=components)
