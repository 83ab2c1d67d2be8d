"""In-process blob store metrics."""

import threading

from s3blobstore.application.ports import BlobStoreMetricsStore
from s3blobstore.domain.models.metrics import BlobStoreMetrics


class InMemoryBlobStoreMetricsStore(BlobStoreMetricsStore):
    """Thread-safe counters kept for the lifetime of the process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._blob_count = 0
        self._total_size = 0

    def record_create(self, size: int) -> None:
        with self._lock:
            self._blob_count += 1
            self._total_size += size

    def record_delete(self, size: int) -> None:
        with self._lock:
            self._blob_count = max(0, self._blob_count - 1)
            self._total_size = max(0, self._total_size - size)

    def get_metrics(self) -> BlobStoreMetrics:
        with self._lock:
            return BlobStoreMetrics(
                blob_count=self._blob_count,
                total_size=self._total_size,
            )

    def remove(self) -> None:
        with self._lock:
            self._blob_count = 0
            self._total_size = 0
