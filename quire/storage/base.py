"""
Storage abstraction layer.

All persistence goes through these interfaces so implementations can be
swapped (in-memory -> MongoDB/DynamoDB, local filesystem -> S3) without
touching route code.

- DocumentStore: collection-based records (users, submissions, publications)
- BlobStore: manuscript files addressed by key
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


# =============================================================================
# Storage Interfaces
# =============================================================================


class BlobStore(ABC):
    """
    Storage for uploaded manuscripts.

    AWS Implementation: S3
    Local Implementation: Filesystem
    """

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        """Store content, return the key it was stored under."""
        pass

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Retrieve content by key. Raises FileNotFoundError if absent."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete content."""
        pass

    @abstractmethod
    async def get_url(self, key: str, expires_in: int = 3600) -> str:
        """Get a URL for direct access."""
        pass


class DocumentStore(ABC):
    """
    Storage for structured records.

    Local Implementation: in-memory dict of collections
    """

    @abstractmethod
    async def save(self, collection: str, id: str, data: dict[str, Any]) -> None:
        """Save a document to a collection."""
        pass

    @abstractmethod
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        """Get a document by ID."""
        pass

    @abstractmethod
    async def delete(self, collection: str, id: str) -> bool:
        """Delete a document."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Query documents with optional equality filters."""
        pass

    @abstractmethod
    async def update(self, collection: str, id: str, updates: dict[str, Any]) -> bool:
        """Partial update of a document."""
        pass

    @abstractmethod
    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        """Count documents matching equality filters."""
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for all storage backends.

    Built once in the app lifespan and read by routes through
    `quire.api.deps.get_storage`.
    """

    model_config = {"arbitrary_types_allowed": True}

    documents: DocumentStore
    blobs: BlobStore


# =============================================================================
# Collection Names
# =============================================================================


class Collections:
    """Standard collection names."""

    USERS = "users"
    PUBLICATIONS = "publications"
    SUBMISSIONS = "submissions"
