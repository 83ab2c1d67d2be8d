"""Domain value objects."""

from s3blobstore.domain.value_objects.bucket_name import (
    BUCKET_NAME_PATTERN,
    is_valid_bucket_name,
)
from s3blobstore.domain.value_objects.configuration import (
    DEFAULT_EXPIRATION_IN_DAYS,
    BlobStoreConfiguration,
)

__all__ = [
    "BUCKET_NAME_PATTERN",
    "is_valid_bucket_name",
    "DEFAULT_EXPIRATION_IN_DAYS",
    "BlobStoreConfiguration",
]
