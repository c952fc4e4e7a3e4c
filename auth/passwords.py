"""
auth/passwords.py -- One-way password hashing with bcrypt.

Using bcrypt directly rather than passlib[bcrypt]: passlib's wrap-bug
detection builds a password longer than 72 bytes, which bcrypt 4.x rejects.

bcrypt only considers the first 72 bytes of its input and current releases
raise on anything longer, so both hash() and verify() truncate explicitly.
Passwords are capped at 128 characters by validation, which can still exceed
72 bytes for multi-byte text.

The dummy hash enables timing equalization in login [C1]: an unknown email
still pays for one bcrypt verification, so response time does not reveal
whether the account exists.
"""

from __future__ import annotations

import bcrypt

_BCRYPT_MAX_BYTES = 72
_DUMMY_PASSWORD = "accessgate_timing_dummy"


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class CredentialHasher:
    """Salted, deliberately slow password hashing.

    rounds is the bcrypt cost factor (log2 of the iteration count). Tests use
    the minimum (4); production defaults to 12 via Settings.bcrypt_rounds.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        # Every verify_dummy call, the first included, costs exactly one bcrypt check.
        self._dummy_hash = self.hash(_DUMMY_PASSWORD)

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of plain. A fresh salt is drawn on every call."""
        return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if plain matches hashed. Never raises on mismatch or a corrupt hash."""
        try:
            return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False

    def verify_dummy(self, plain: str) -> None:
        """Burn one verification against a throwaway hash [C1]."""
        self.verify(plain, self._dummy_hash)
