"""Space-used quota check."""

from __future__ import annotations

from typing import TYPE_CHECKING

from s3blobstore.application.ports import BlobStoreQuotaResult, BlobStoreQuotaService

if TYPE_CHECKING:
    from s3blobstore.application.services.blob_store import S3BlobStore


class SpaceUsedQuotaService(BlobStoreQuotaService):
    """Flags a store whose total blob size exceeds a byte limit."""

    def __init__(self, limit_bytes: int) -> None:
        if limit_bytes < 0:
            raise ValueError("limit_bytes must be >= 0")
        self._limit = limit_bytes

    def check_quota(self, blob_store: S3BlobStore) -> BlobStoreQuotaResult:
        used = blob_store.metrics().total_size
        name = blob_store.name
        if used > self._limit:
            return BlobStoreQuotaResult(
                is_violation=True,
                store_name=name,
                message=(
                    f"Blob store {name} is using {used} bytes "
                    f"and has a limit of {self._limit} bytes"
                ),
            )
        return BlobStoreQuotaResult(
            is_violation=False,
            store_name=name,
            message=f"Blob store {name} is using {used} of {self._limit} bytes",
        )
