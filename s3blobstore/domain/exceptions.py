"""Domain exceptions for the blob store."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from s3blobstore.domain.models.blob import BlobId


class BlobStoreException(Exception):
    """Base exception for blob store errors."""


class BlobStoreConfigurationError(BlobStoreException):
    """Raised when the store cannot be initialized with its configuration."""

    def __init__(self, store_name: str, reason: str) -> None:
        self.store_name = store_name
        self.reason = reason
        super().__init__(f"Invalid configuration for blob store '{store_name}': {reason}")


class IncompatibleBlobStoreError(BlobStoreException):
    """Raised when the bucket holds a store of an unsupported type/version."""

    def __init__(self, bucket: str, store_type: str | None) -> None:
        self.bucket = bucket
        self.store_type = store_type
        super().__init__(
            f"Unsupported blob store type/version '{store_type}' in bucket {bucket}"
        )


class BlobStoreStateError(BlobStoreException):
    """Raised when an operation is called in the wrong lifecycle state."""

    def __init__(self, operation: str, state: str) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while blob store is {state}")


class BlobStoreStorageError(BlobStoreException):
    """Raised when a backend read or write fails."""

    def __init__(self, reason: str, blob_id: BlobId | None = None) -> None:
        self.reason = reason
        self.blob_id = blob_id
        if blob_id is None:
            super().__init__(reason)
        else:
            super().__init__(f"Blob {blob_id}: {reason}")
