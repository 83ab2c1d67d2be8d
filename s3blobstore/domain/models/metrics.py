"""Blob store usage metrics."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BlobStoreMetrics:
    """Point-in-time usage of one blob store."""

    blob_count: int = 0
    total_size: int = 0
