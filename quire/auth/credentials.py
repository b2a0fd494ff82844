"""
Credential verification for the login route.

Unknown email and wrong password produce the same `LoginError`, so the
response can't be used to probe which emails are registered. The
difference only shows up in debug logs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from starlette.concurrency import run_in_threadpool

from quire.auth.passwords import PasswordHasher
from quire.core.models import Identity
from quire.users.store import UserStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "invalid-credentials"


@dataclass(frozen=True)
class LoginError:
    reason: str = INVALID_CREDENTIALS


class CredentialVerifier:
    """Checks email + password against the credential store."""

    def __init__(self, users: UserStore, hasher: PasswordHasher):
        self.users = users
        self.hasher = hasher

    async def authenticate(self, email: str, password: str) -> Identity | LoginError:
        """
        Authenticate a user.

        Returns:
            Identity snapshot of the stored user, or LoginError
        """
        user = await self.users.find_by_email(email)
        if user is None:
            logger.debug("Login failed: no such user")
            return LoginError()

        # bcrypt is CPU-bound; keep it off the event loop
        if not await run_in_threadpool(self.hasher.verify, password, user.password_hash):
            logger.debug(f"Login failed: bad password for user {user.id}")
            return LoginError()

        return user.to_identity()
