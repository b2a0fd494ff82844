"""
Authentication and authorization core.

- passwords: bcrypt hashing
- credentials: email + password -> Identity
- tokens: signed session tokens (issue, verify, refresh)
- access: the tier table every route is checked against
- policies: FastAPI dependencies on top of access

Route-facing modules (policies, routes) are not imported here; they
depend on `quire.api.deps`, which in turn imports this package.
"""

from quire.auth.access import AuthTier, can_access, is_reviewer
from quire.auth.credentials import CredentialVerifier, LoginError
from quire.auth.passwords import PasswordHasher
from quire.auth.tokens import (
    SessionRefresher,
    SignedToken,
    TokenError,
    TokenErrorReason,
    TokenIssuer,
    TokenVerifier,
)

__all__ = [
    "AuthTier",
    "can_access",
    "is_reviewer",
    "CredentialVerifier",
    "LoginError",
    "PasswordHasher",
    "SessionRefresher",
    "SignedToken",
    "TokenError",
    "TokenErrorReason",
    "TokenIssuer",
    "TokenVerifier",
]
