# =============================================================================
# User API Routes
# =============================================================================
#
# Endpoints:
#   GET    /api/users        - Liveness probe for the users API
#   POST   /api/users        - Register
#   GET    /api/users/{id}   - Read a profile         (self or admin)
#   PUT    /api/users/{id}   - Update a profile       (self or admin)
#   DELETE /api/users/{id}   - Delete an account      (self or admin)
#
# Role flags can only be changed by an admin. An admin account can only
# be deleted by its owner.
#
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Response
from starlette.concurrency import run_in_threadpool

from quire.api.deps import get_password_hasher, get_user_store
from quire.auth.access import AuthTier
from quire.auth.passwords import PasswordHasher
from quire.auth.policies import authorize, require_auth
from quire.core.models import Identity
from quire.errors import AuthorizationError, ForbiddenError, NotFoundError, ValidationError
from quire.users.store import UserStore
from quire.users.validation import validate_registration, validate_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
async def users_root():
    return {"ok": True}


@router.post("", status_code=201)
async def register(
    body: dict[str, Any] | None = Body(default=None),
    users: UserStore = Depends(get_user_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    """
    Create a new account.

    New accounts are always plain authors; admin/editor flags in the
    body are ignored.
    """
    fields = validate_registration(body)

    if await users.count_by_email(fields["email"]):
        raise ValidationError("User with that email already exists", location="email")

    password = fields.pop("password")
    fields["password_hash"] = await run_in_threadpool(hasher.hash, password)

    user = await users.create(fields)
    return user.serialize()


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    identity: Identity = Depends(require_auth),
    users: UserStore = Depends(get_user_store),
):
    authorize(identity, user_id, AuthTier.SELF_OR_ADMIN)

    user = await users.find_by_id(user_id)
    if user is None:
        raise NotFoundError("No user with that ID")
    return user.serialize()


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    body: dict[str, Any] | None = Body(default=None),
    identity: Identity = Depends(require_auth),
    users: UserStore = Depends(get_user_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    """
    Update profile fields.

    Tokens already issued keep their old claims until refreshed by a new
    login.
    """
    authorize(identity, user_id, AuthTier.SELF_OR_ADMIN)

    if body and "id" in body and str(body["id"]) != user_id:
        raise ValidationError("Request path id and body id must match", location="id")

    updates = validate_update(body)
    if ("admin" in updates or "editor" in updates) and not identity.admin:
        raise AuthorizationError("Only admins can change roles")

    if "password" in updates:
        updates["password_hash"] = await run_in_threadpool(hasher.hash, updates.pop("password"))

    user = await users.update(user_id, updates)
    return user.serialize()


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    identity: Identity = Depends(require_auth),
    users: UserStore = Depends(get_user_store),
):
    authorize(identity, user_id, AuthTier.SELF_OR_ADMIN)

    user = await users.find_by_id(user_id)
    if user is None:
        raise NotFoundError("No user with that ID")
    if user.admin and user.id != identity.id:
        raise ForbiddenError("Cannot delete an admin account")

    await users.delete(user_id)
    logger.info(f"User {user_id} deleted by {identity.id}")
    return Response(status_code=204)
