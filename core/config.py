"""
core/config.py -- AccessGate settings, read once from the environment.

Every environment read in the project goes through get_settings(); other
modules never touch os.environ for configuration. Field names map directly to
variable names (secret_key <- SECRET_KEY, bcrypt_rounds <- BCRYPT_ROUNDS), and
a local .env file is honoured when present.

The auth core never sees this object. api/main.py turns it into a TokenConfig
and a CredentialHasher at startup, so changing TOKEN_EXPIRE_SECONDS affects
only tokens issued after the restart.

Secret policy:
  [M6] A SECRET_KEY under 32 characters is refused in every mode.
  [M7] Outside DEBUG mode a missing SECRET_KEY stops the process at startup.

Layer rule: core/ is the kernel. No imports from api/ or auth/.
"""

from __future__ import annotations

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("accessgate.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'accessgate.db'}"

SEVEN_DAYS = 7 * 24 * 60 * 60
MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Runtime configuration.

    Every field has a default, so tests can build Settings(...) directly with
    keyword overrides and no .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False
    # "" means unset; validate_secret_key never lets it through.
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    token_expire_seconds: int = Field(default=SEVEN_DAYS, gt=0)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Apply the secret policy [M6] [M7].

        With DEBUG=true a random key is generated and a warning logged; tokens
        then die with the process.
        """
        if not self.secret_key:
            if not self.debug:
                raise ValueError(
                    "SECRET_KEY is required when DEBUG is off. "
                    "Export SECRET_KEY (or add it to .env), or set DEBUG=true for local development."
                )
            self.secret_key = secrets.token_hex(MIN_SECRET_LENGTH)
            logger.warning("SECRET_KEY not set; generated a throwaway key for this DEBUG process.")
        if len(self.secret_key) < MIN_SECRET_LENGTH:
            raise ValueError(f"SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Cached Settings instance.

    Tests that change the environment call get_settings.cache_clear().
    """
    return Settings()
