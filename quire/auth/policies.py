"""
Policies - the route-facing side of access control.

Two ways in, both ending at `can_access`:

    # Tier without ownership: resolve it as a dependency
    @router.post("/publications")
    async def create(identity: Identity = Depends(require(AuthTier.ADMIN_ONLY))):
        ...

    # Tier with ownership: load the resource, then authorize
    @router.get("/submissions/{submission_id}")
    async def get_one(identity: Identity = Depends(require_auth)):
        submission = ...
        authorize(identity, submission.author_id, AuthTier.OWNER_OR_EDITOR_OR_ADMIN)

Missing or rejected tokens raise AuthenticationError (401). A valid
identity that fails its tier raises AuthorizationError, also 401.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quire.api.deps import get_token_verifier
from quire.auth.access import AuthTier, can_access
from quire.auth.tokens import TokenError, TokenVerifier
from quire.core.models import Identity
from quire.errors import AuthenticationError, AuthorizationError


# Optional bearer (doesn't fail if no token; require_auth decides)
optional_bearer = HTTPBearer(auto_error=False)


async def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> Identity | None:
    """Identity from the Authorization header, or None if absent or invalid."""
    if not credentials:
        return None

    result = verifier.verify(credentials.credentials)
    if isinstance(result, TokenError):
        return None
    return result


async def require_auth(identity: Identity | None = Depends(get_identity)) -> Identity:
    """Resolve to the caller's identity or fail with 401."""
    if identity is None:
        raise AuthenticationError("Unauthorized")
    return identity


def authorize(identity: Identity | None, owner_id: str | None, tier: AuthTier) -> Identity:
    """
    Enforce a tier for a specific resource.

    Returns the identity so calls can be chained; raises otherwise.
    """
    if identity is None:
        raise AuthenticationError("Unauthorized")
    if not can_access(identity, owner_id, tier):
        raise AuthorizationError("Not authorized")
    return identity


def require(tier: AuthTier) -> Callable:
    """
    FastAPI dependency enforcing a tier that doesn't depend on ownership.

    Ownership tiers need the resource first; use `authorize()` for those.
    """
    if tier in (AuthTier.SELF_OR_ADMIN, AuthTier.OWNER_OR_EDITOR_OR_ADMIN):
        raise ValueError(f"{tier.value} needs a resource owner; call authorize() in the route")

    async def dependency(identity: Identity = Depends(require_auth)) -> Identity:
        return authorize(identity, None, tier)

    return dependency
