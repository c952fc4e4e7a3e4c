"""
tests/conftest.py -- Shared test fixtures for AccessGate.

This module provides:
  - unit fixtures: an in-memory AccountStore, a low-cost CredentialHasher,
    a TokenService with a fixed secret, and the three core services on top
  - _patch_lifespan(): wires a test store into app.state, bypassing real startup
  - api_client: TestClient with an admin account and its bearer token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the API client because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to each
worker thread. Unit tests run on one thread and use plain :memory:.

bcrypt runs at cost 4 everywhere in tests; production defaults to 12.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# Set DEBUG before any core import so get_settings() can auto-generate
# SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app, init_services
from auth.gate import AuthorizationGate
from auth.lifecycle import AccountLifecycle
from auth.models import Account, Role, TokenClaims
from auth.passwords import CredentialHasher
from auth.service import AuthenticationFlow
from auth.store import AccountStore
from auth.tokens import TokenConfig, TokenService
from core.config import Settings

TEST_SECRET = "test-secret-key-0123456789abcdef0123456789"
PASSWORD = "Secret123"

# ---------------------------------------------------------------------------
# Unit fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[AccountStore, None, None]:
    s = AccountStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def hasher() -> CredentialHasher:
    return CredentialHasher(rounds=4)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(TokenConfig(secret_key=TEST_SECRET))


@pytest.fixture
def flow(store: AccountStore, hasher: CredentialHasher, tokens: TokenService) -> AuthenticationFlow:
    return AuthenticationFlow(store, hasher, tokens)


@pytest.fixture
def gate(store: AccountStore, tokens: TokenService) -> AuthorizationGate:
    return AuthorizationGate(tokens, store)


@pytest.fixture
def lifecycle(store: AccountStore) -> AccountLifecycle:
    return AccountLifecycle(store)


@pytest.fixture
def make_account(store: AccountStore, hasher: CredentialHasher):
    """Factory: insert an account directly through the store."""

    def _make(email: str, role: Role = Role.user, password: str = PASSWORD, full_name: str = "Test User") -> Account:
        return store.create_account(email, hasher.hash(password), full_name, role=role)

    return _make


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


def _test_settings() -> Settings:
    return Settings(debug=True, secret_key=TEST_SECRET, bcrypt_rounds=4)


def _patch_lifespan(store: AccountStore):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-created test store into app.state so TestClient routes see
    an isolated test DB rather than the configured database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        init_services(app, store, _test_settings())
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, str], None, None]:
    """Yield (client, admin_token, admin_id) for API integration tests.

    One shared-memory DB per test module, named after the module so modules
    never see each other's accounts. Tests that create accounts must use
    unique emails because the DB lives for the whole module.
    """
    db_name = request.module.__name__.rsplit(".", 1)[-1]
    store = AccountStore(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")

    admin = store.create_account(
        "admin@example.com",
        CredentialHasher(rounds=4).hash(PASSWORD),
        "Test Admin",
        role=Role.admin,
    )
    token = TokenService(TokenConfig(secret_key=TEST_SECRET)).issue(TokenClaims.for_account(admin))

    app.router.lifespan_context = _patch_lifespan(store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, admin.id

    store.close()
