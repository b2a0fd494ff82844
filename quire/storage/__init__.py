"""
Storage abstractions.

- DocumentStore -> in-memory locally, any collection store in production
- BlobStore -> local filesystem or S3
"""

from quire.storage.base import (
    BlobStore,
    Collections,
    DocumentStore,
    StorageProvider,
)
from quire.storage.local import (
    InMemoryDocumentStore,
    LocalBlobStore,
    create_local_storage,
)

__all__ = [
    "BlobStore",
    "Collections",
    "DocumentStore",
    "StorageProvider",
    "InMemoryDocumentStore",
    "LocalBlobStore",
    "create_local_storage",
]
