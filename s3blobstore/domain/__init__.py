"""Domain layer - blob identity, attributes, configuration and errors."""

from s3blobstore.domain.exceptions import (
    BlobStoreConfigurationError,
    BlobStoreException,
    BlobStoreStateError,
    BlobStoreStorageError,
    IncompatibleBlobStoreError,
)
from s3blobstore.domain.models import (
    Blob,
    BlobAttributes,
    BlobId,
    BlobStoreMetrics,
)
from s3blobstore.domain.value_objects import BlobStoreConfiguration, is_valid_bucket_name

__all__ = [
    # Exceptions
    "BlobStoreException",
    "BlobStoreConfigurationError",
    "IncompatibleBlobStoreError",
    "BlobStoreStateError",
    "BlobStoreStorageError",
    # Models
    "Blob",
    "BlobAttributes",
    "BlobId",
    "BlobStoreMetrics",
    # Value objects
    "BlobStoreConfiguration",
    "is_valid_bucket_name",
]
