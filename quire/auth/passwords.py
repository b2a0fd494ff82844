"""
Password hashing.

bcrypt with a fixed work factor. Input beyond bcrypt's 72-byte limit is
truncated on both hash and verify so the two always agree.
"""

from __future__ import annotations

import logging

import bcrypt

from quire.errors import HashingError

logger = logging.getLogger(__name__)

BCRYPT_MAX_BYTES = 72
DEFAULT_ROUNDS = 10


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordHasher:
    """Salted one-way hashing for stored credentials."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """
        Hash a password.

        Returns the bcrypt modular-crypt string ("$2b$10$...").

        Raises:
            HashingError: bcrypt failed internally
        """
        try:
            hashed = bcrypt.hashpw(_encode(plaintext), bcrypt.gensalt(rounds=self.rounds))
        except (ValueError, TypeError) as e:
            raise HashingError("Password hashing failed") from e
        return hashed.decode("ascii")

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Check a password against a stored hash. Never raises on mismatch."""
        try:
            return bcrypt.checkpw(_encode(plaintext), hashed.encode("ascii"))
        except (ValueError, TypeError, AttributeError):
            logger.warning("Stored password hash is not a valid bcrypt hash")
            return False
