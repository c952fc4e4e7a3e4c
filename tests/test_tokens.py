"""Unit tests for auth/tokens.py -- TokenService.

Covers:
- issue() produces a three-part header.payload.signature string
- verify(issue(claims)) returns the claims unchanged
- expired tokens raise TokenExpiredError; tampered, foreign-secret and
  malformed tokens raise TokenInvalidError
- both token errors are UnauthenticatedError variants
- tokens missing claims or carrying an unknown role are rejected
- a missing secret raises ConfigurationError
- changing the expiry horizon does not affect tokens already issued
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.errors import ConfigurationError, TokenExpiredError, TokenInvalidError, UnauthenticatedError
from auth.models import Role, TokenClaims
from auth.tokens import TokenConfig, TokenService

SECRET = "unit-test-secret-0123456789abcdef012345"
CLAIMS = TokenClaims(account_id="8f0c3c1e-5a3e-4c8e-9d54-0c1f2b7a9e11", email="test@example.com", role=Role.user)


@pytest.fixture
def service() -> TokenService:
    return TokenService(TokenConfig(secret_key=SECRET))


class TestIssueAndVerify:
    def test_token_has_three_parts(self, service: TokenService) -> None:
        token = service.issue(CLAIMS)
        assert isinstance(token, str)
        assert len(token.split(".")) == 3

    def test_round_trip_returns_claims_unchanged(self, service: TokenService) -> None:
        assert service.verify(service.issue(CLAIMS)) == CLAIMS

    def test_admin_role_round_trip(self, service: TokenService) -> None:
        claims = TokenClaims(account_id="a1", email="boss@example.com", role=Role.admin)
        assert service.verify(service.issue(claims)).role is Role.admin

    def test_expiry_uses_configured_horizon(self) -> None:
        service = TokenService(TokenConfig(secret_key=SECRET, expire_seconds=3600))
        payload = jwt.get_unverified_claims(service.issue(CLAIMS))
        assert payload["exp"] - payload["iat"] == 3600

    def test_default_horizon_is_seven_days(self, service: TokenService) -> None:
        payload = jwt.get_unverified_claims(service.issue(CLAIMS))
        assert payload["exp"] - payload["iat"] == 7 * 24 * 3600

    def test_changing_horizon_keeps_old_tokens_valid(self, service: TokenService) -> None:
        token = service.issue(CLAIMS)
        shortened = TokenService(TokenConfig(secret_key=SECRET, expire_seconds=1))
        assert shortened.verify(token) == CLAIMS


class TestVerifyFailures:
    def test_expired_token(self) -> None:
        expired = TokenService(TokenConfig(secret_key=SECRET, expire_seconds=-10))
        token = expired.issue(CLAIMS)
        with pytest.raises(TokenExpiredError) as exc_info:
            expired.verify(token)
        assert exc_info.value.message == "Token has expired"
        assert isinstance(exc_info.value, UnauthenticatedError)

    def test_tampered_signature(self, service: TokenService) -> None:
        header, payload, signature = service.issue(CLAIMS).split(".")
        flipped = "A" if signature[10] != "A" else "B"
        tampered = ".".join([header, payload, signature[:10] + flipped + signature[11:]])
        with pytest.raises(TokenInvalidError) as exc_info:
            service.verify(tampered)
        assert exc_info.value.message == "Invalid token"
        assert isinstance(exc_info.value, UnauthenticatedError)

    def test_tampered_payload(self, service: TokenService) -> None:
        token = service.issue(CLAIMS)
        other = service.issue(TokenClaims(account_id="x", email="x@example.com", role=Role.admin))
        forged = ".".join([token.split(".")[0], other.split(".")[1], token.split(".")[2]])
        with pytest.raises(TokenInvalidError):
            service.verify(forged)

    def test_foreign_secret(self, service: TokenService) -> None:
        foreign = TokenService(TokenConfig(secret_key="another-secret-0123456789abcdef0123"))
        with pytest.raises(TokenInvalidError):
            service.verify(foreign.issue(CLAIMS))

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c", "....."])
    def test_malformed(self, service: TokenService, garbage: str) -> None:
        with pytest.raises(TokenInvalidError):
            service.verify(garbage)

    def test_missing_claims(self, service: TokenService) -> None:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
        token = jwt.encode({"sub": "abc", "exp": exp}, SECRET, algorithm="HS256")
        with pytest.raises(TokenInvalidError):
            service.verify(token)

    def test_missing_exp(self, service: TokenService) -> None:
        token = jwt.encode({"sub": "abc", "email": "a@x.com", "role": "user"}, SECRET, algorithm="HS256")
        with pytest.raises(TokenInvalidError):
            service.verify(token)

    def test_unknown_role(self, service: TokenService) -> None:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
        token = jwt.encode({"sub": "abc", "email": "a@x.com", "role": "superuser", "exp": exp}, SECRET, "HS256")
        with pytest.raises(TokenInvalidError):
            service.verify(token)


class TestConfiguration:
    def test_issue_without_secret(self) -> None:
        with pytest.raises(ConfigurationError):
            TokenService(TokenConfig(secret_key="")).issue(CLAIMS)

    def test_verify_without_secret(self, service: TokenService) -> None:
        token = service.issue(CLAIMS)
        with pytest.raises(ConfigurationError):
            TokenService(TokenConfig(secret_key="")).verify(token)


class TestClaimsFor:
    def test_minimal_claims_from_account(self, service: TokenService, make_account) -> None:
        account = make_account("claims@example.com", role=Role.admin)
        claims = service.claims_for(account)
        assert claims == TokenClaims(account_id=account.id, email="claims@example.com", role=Role.admin)
        assert service.verify(service.issue(claims)) == claims
