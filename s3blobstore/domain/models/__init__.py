"""Domain models."""

from s3blobstore.domain.models.attributes import (
    BlobAttributes,
    dump_properties,
    load_properties,
)
from s3blobstore.domain.models.blob import DIRECT_PATH_PREFIX, Blob, BlobId
from s3blobstore.domain.models.headers import (
    BLOB_NAME_HEADER,
    CONTENT_TYPE_HEADER,
    CREATED_BY_HEADER,
    DIRECT_PATH_BLOB_HEADER,
)
from s3blobstore.domain.models.metrics import BlobStoreMetrics

__all__ = [
    # Blob
    "Blob",
    "BlobId",
    "DIRECT_PATH_PREFIX",
    # Attributes
    "BlobAttributes",
    "dump_properties",
    "load_properties",
    # Headers
    "BLOB_NAME_HEADER",
    "CONTENT_TYPE_HEADER",
    "CREATED_BY_HEADER",
    "DIRECT_PATH_BLOB_HEADER",
    # Metrics
    "BlobStoreMetrics",
]
