"""
Access control - who may do what to which resource.

A single pure decision function over a small set of tiers. Routes never
inspect role flags themselves; they name a tier and, where ownership
matters, pass the resource owner's id.

`admin` and `editor` are independent flags. An admin is not assumed to
be an editor; the tiers that accept editors also accept admins by
listing both.
"""

from __future__ import annotations

from enum import Enum

from quire.core.models import Identity


class AuthTier(str, Enum):
    """Access requirement a route declares for an operation."""

    SELF_OR_ADMIN = "self-or-admin"
    ADMIN_ONLY = "admin-only"
    EDITOR_OR_ADMIN = "editor-or-admin"
    OWNER_OR_EDITOR_OR_ADMIN = "owner-or-editor-or-admin"
    AUTHENTICATED = "authenticated"


def _owns(identity: Identity, owner_id: str | None) -> bool:
    return owner_id is not None and identity.id == str(owner_id)


def can_access(
    identity: Identity | None,
    owner_id: str | None,
    tier: AuthTier,
) -> bool:
    """
    Decide whether an identity satisfies a tier.

    Args:
        identity: Verified identity, or None for anonymous requests
        owner_id: Id of the user who owns the resource, if any
        tier: The requirement declared by the route

    Anonymous requests fail every tier.
    """
    if identity is None:
        return False

    if tier is AuthTier.AUTHENTICATED:
        return True
    if tier is AuthTier.ADMIN_ONLY:
        return identity.admin
    if tier is AuthTier.EDITOR_OR_ADMIN:
        return identity.editor or identity.admin
    if tier is AuthTier.SELF_OR_ADMIN:
        return _owns(identity, owner_id) or identity.admin
    if tier is AuthTier.OWNER_OR_EDITOR_OR_ADMIN:
        return _owns(identity, owner_id) or identity.editor or identity.admin

    raise ValueError(f"Unknown tier: {tier!r}")


def is_reviewer(identity: Identity | None) -> bool:
    """Editors and admins see reviewer-only submission fields."""
    return can_access(identity, None, AuthTier.EDITOR_OR_ADMIN)
