"""Collaborator interfaces consumed by the blob store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from s3blobstore.domain.models.metrics import BlobStoreMetrics

if TYPE_CHECKING:
    from s3blobstore.application.services.blob_store import S3BlobStore
    from s3blobstore.domain.models.blob import BlobId


class BlobStoreMetricsStore(ABC):
    """Tracks blob count and total size for one store."""

    @abstractmethod
    def record_create(self, size: int) -> None:
        """Account for a newly stored blob."""

    @abstractmethod
    def record_delete(self, size: int) -> None:
        """Account for a hard-deleted blob."""

    @abstractmethod
    def get_metrics(self) -> BlobStoreMetrics:
        """Current usage snapshot."""

    @abstractmethod
    def remove(self) -> None:
        """Discard all metrics; the store is being torn down."""


@dataclass(frozen=True)
class BlobStoreQuotaResult:
    """Outcome of a quota check."""

    is_violation: bool
    store_name: str
    message: str


class BlobStoreQuotaService(ABC):
    """Quota checks, consulted by callers above the blob store."""

    @abstractmethod
    def check_quota(self, blob_store: S3BlobStore) -> BlobStoreQuotaResult | None:
        """Check the store against its quota. None when no quota applies."""


class BlobStoreUsageChecker(ABC):
    """Answers whether some higher-level entity still references a blob."""

    @abstractmethod
    def test(self, blob_store: S3BlobStore, blob_id: BlobId, blob_name: str) -> bool:
        """True if the blob is still in use."""
