"""S3-backed blob store with soft delete and lifecycle-managed expiry."""

from s3blobstore.application.services.blob_store import BlobStoreState, S3BlobStore
from s3blobstore.domain.models import Blob, BlobAttributes, BlobId
from s3blobstore.domain.value_objects import BlobStoreConfiguration

__version__ = "0.1.0"

__all__ = [
    "Blob",
    "BlobAttributes",
    "BlobId",
    "BlobStoreConfiguration",
    "BlobStoreState",
    "S3BlobStore",
]
