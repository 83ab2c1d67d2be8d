"""Infrastructure layer."""

from s3blobstore.infrastructure.factory import (
    BlobStoreFactory,
    get_factory,
    reset_factory,
)

__all__ = [
    "BlobStoreFactory",
    "get_factory",
    "reset_factory",
]
