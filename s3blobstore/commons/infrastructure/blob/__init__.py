"""Object storage abstractions and implementations."""

from s3blobstore.commons.infrastructure.blob.base import (
    ObjectNotFoundError,
    ObjectStorageBase,
    ObjectStorageClientError,
    ObjectStorageError,
)
from s3blobstore.commons.infrastructure.blob.minio_provider import MinioObjectStorage

__all__ = [
    # Base classes
    "ObjectStorageBase",
    # Implementations
    "MinioObjectStorage",
    # Exceptions
    "ObjectStorageError",
    "ObjectNotFoundError",
    "ObjectStorageClientError",
]
