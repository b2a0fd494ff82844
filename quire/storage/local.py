"""
Local storage implementations for development and tests.

These are in-memory or filesystem-based implementations
that work without any external services.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any

from quire.storage.base import BlobStore, DocumentStore, StorageProvider


# =============================================================================
# Local Filesystem Blob Storage
# =============================================================================


class LocalBlobStore(BlobStore):
    """Store manuscripts on the local filesystem."""

    def __init__(self, base_path: str = "./data/blobs"):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _key_to_path(self, key: str) -> Path:
        # Keys are relative; refuse anything that climbs out of base_path
        parts = PurePosixPath(key).parts
        if not parts or key.startswith("/") or ".." in parts:
            raise ValueError(f"Invalid blob key: {key!r}")
        return self.base_path.joinpath(*parts)

    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        path = self._key_to_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return key

    async def get(self, key: str) -> bytes:
        path = self._key_to_path(key)
        if not path.exists():
            raise FileNotFoundError(f"Content not found: {key}")
        return path.read_bytes()

    async def delete(self, key: str) -> bool:
        path = self._key_to_path(key)
        if path.exists():
            path.unlink()
            return True
        return False

    async def get_url(self, key: str, expires_in: int = 3600) -> str:
        return f"file://{self._key_to_path(key).absolute()}"


# =============================================================================
# In-Memory Document Storage
# =============================================================================


class InMemoryDocumentStore(DocumentStore):
    """In-memory document storage for development."""

    def __init__(self):
        self._data: dict[str, dict[str, dict[str, Any]]] = {}

    async def save(self, collection: str, id: str, data: dict[str, Any]) -> None:
        if collection not in self._data:
            self._data[collection] = {}
        self._data[collection][id] = {
            **data,
            "_id": id,
            "_updated_at": datetime.now(timezone.utc).isoformat(),
        }

    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        doc = self._data.get(collection, {}).get(id)
        return dict(doc) if doc is not None else None

    async def delete(self, collection: str, id: str) -> bool:
        if collection in self._data and id in self._data[collection]:
            del self._data[collection][id]
            return True
        return False

    def _matching(self, collection: str, filters: dict[str, Any] | None) -> list[dict[str, Any]]:
        results = list(self._data.get(collection, {}).values())
        if not filters:
            return results
        return [
            doc for doc in results
            if all(doc.get(key) == value for key, value in filters.items())
        ]

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        results = self._matching(collection, filters)
        return [dict(doc) for doc in results[offset:offset + limit]]

    async def update(self, collection: str, id: str, updates: dict[str, Any]) -> bool:
        if collection in self._data and id in self._data[collection]:
            self._data[collection][id].update(updates)
            self._data[collection][id]["_updated_at"] = datetime.now(timezone.utc).isoformat()
            return True
        return False

    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        return len(self._matching(collection, filters))


# =============================================================================
# Factory
# =============================================================================


def create_local_storage(data_dir: str = "./data") -> StorageProvider:
    """Create a StorageProvider with local implementations."""
    return StorageProvider(
        documents=InMemoryDocumentStore(),
        blobs=LocalBlobStore(f"{data_dir}/blobs"),
    )
