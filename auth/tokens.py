"""
auth/tokens.py -- Signed, time-bounded bearer tokens.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with the configured secret and
       carry the account id (sub), email, role, iat and exp. There is no
       revocation list: logout is a client-side discard, so a token stays
       cryptographically valid until exp.

  Explicit config: TokenService receives a TokenConfig at construction and
       never consults the environment. Changing expire_seconds only affects
       tokens issued afterwards; exp is baked into each token.

  Failure kinds: verify() distinguishes an expired token (TokenExpiredError)
       from every other failure (TokenInvalidError) so the boundary can tell
       the client which one happened.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from auth.errors import ConfigurationError, TokenExpiredError, TokenInvalidError
from auth.models import Account, Role, TokenClaims

logger = logging.getLogger("accessgate.auth.tokens")

_REQUIRED_CLAIMS = ("sub", "email", "role", "exp")


@dataclass(frozen=True)
class TokenConfig:
    secret_key: str
    expire_seconds: int = 7 * 24 * 60 * 60
    algorithm: str = "HS256"


class TokenService:
    """Issue and verify JWTs for authenticated accounts.

    Usage:
        tokens = TokenService(TokenConfig(secret_key=settings.secret_key))
        token = tokens.issue(tokens.claims_for(account))
        claims = tokens.verify(token)
    """

    def __init__(self, config: TokenConfig) -> None:
        self.config = config

    def _secret(self) -> str:
        if not self.config.secret_key:
            raise ConfigurationError("No token signing secret is configured.")
        return self.config.secret_key

    def claims_for(self, account: Account) -> TokenClaims:
        return TokenClaims.for_account(account)

    def issue(self, claims: TokenClaims) -> str:
        """Encode claims plus issuance and expiry timestamps into a signed token."""
        secret = self._secret()
        now = datetime.now(timezone.utc)
        payload = {
            "sub": claims.account_id,
            "email": claims.email,
            "role": claims.role.value,
            "iat": now,
            "exp": now + timedelta(seconds=self.config.expire_seconds),
        }
        return jwt.encode(payload, secret, algorithm=self.config.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Validate signature and expiry and return the embedded claims.

        Raises:
            TokenExpiredError: the token is past its exp.
            TokenInvalidError: bad signature, malformed token, or missing claims.
        """
        secret = self._secret()
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except JWTError as exc:
            logger.debug("Token rejected: %s", exc)
            raise TokenInvalidError() from exc

        if any(name not in payload for name in _REQUIRED_CLAIMS):
            raise TokenInvalidError()
        try:
            role = Role(payload["role"])
        except ValueError as exc:
            raise TokenInvalidError() from exc
        return TokenClaims(account_id=str(payload["sub"]), email=payload["email"], role=role)
