"""
Credential store - user records on top of the document store.

Email uniqueness is enforced here, on every create and every email
change. Emails are compared exactly as stored (case-sensitive).
"""

from __future__ import annotations

import logging
from typing import Any

from quire.core.models import User
from quire.errors import NotFoundError, ValidationError
from quire.storage.base import Collections, DocumentStore

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "User with that email already exists"


class UserStore:
    """Persistence for users. Passwords arrive here already hashed."""

    def __init__(self, documents: DocumentStore):
        self.documents = documents

    async def find_by_email(self, email: str) -> User | None:
        docs = await self.documents.query(Collections.USERS, {"email": email}, limit=1)
        return User.model_validate(docs[0]) if docs else None

    async def find_by_id(self, id: str) -> User | None:
        doc = await self.documents.get(Collections.USERS, id)
        return User.model_validate(doc) if doc else None

    async def count_by_email(self, email: str) -> int:
        return await self.documents.count(Collections.USERS, {"email": email})

    async def create(self, fields: dict[str, Any]) -> User:
        """
        Create a user from field values (snake_case or camelCase).

        Raises:
            ValidationError: the email is already registered
        """
        user = User.model_validate(fields)
        if await self.count_by_email(user.email):
            raise ValidationError(DUPLICATE_EMAIL, location="email")

        await self.documents.save(Collections.USERS, user.id, user.model_dump())
        logger.info(f"Created user {user.id}")
        return user

    async def update(self, id: str, fields: dict[str, Any]) -> User:
        """
        Apply a partial update and return the stored result.

        Raises:
            NotFoundError: no such user
            ValidationError: the new email belongs to another user
        """
        current = await self.find_by_id(id)
        if current is None:
            raise NotFoundError("No user with that ID")

        updated = current.model_copy(update=fields)
        if updated.email != current.email and await self.count_by_email(updated.email):
            raise ValidationError(DUPLICATE_EMAIL, location="email")

        # Re-validate so a bad field type can't slip into the store
        updated = User.model_validate(updated.model_dump())
        await self.documents.save(Collections.USERS, id, updated.model_dump())
        return updated

    async def delete(self, id: str) -> None:
        """
        Raises:
            NotFoundError: no such user
        """
        if not await self.documents.delete(Collections.USERS, id):
            raise NotFoundError("No user with that ID")
        logger.info(f"Deleted user {id}")
