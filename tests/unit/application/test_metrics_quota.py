"""Unit tests for metrics and quota services."""

import io
from unittest.mock import MagicMock

import pytest

from s3blobstore.application.services.metrics import InMemoryBlobStoreMetricsStore
from s3blobstore.application.services.quota import SpaceUsedQuotaService
from s3blobstore.domain.models.headers import BLOB_NAME_HEADER
from s3blobstore.domain.models.metrics import BlobStoreMetrics


class TestInMemoryBlobStoreMetricsStore:
    """Tests for InMemoryBlobStoreMetricsStore."""

    def test_starts_empty(self):
        """A new store reports nothing."""
        assert InMemoryBlobStoreMetricsStore().get_metrics() == BlobStoreMetrics()

    def test_create_and_delete(self):
        """Creates add and deletes subtract."""
        metrics = InMemoryBlobStoreMetricsStore()
        metrics.record_create(10)
        metrics.record_create(5)
        metrics.record_delete(10)

        assert metrics.get_metrics() == BlobStoreMetrics(blob_count=1, total_size=5)

    def test_never_negative(self):
        """Deletes without creates do not go below zero."""
        metrics = InMemoryBlobStoreMetricsStore()
        metrics.record_delete(100)

        assert metrics.get_metrics() == BlobStoreMetrics(blob_count=0, total_size=0)

    def test_remove(self):
        """remove() resets all counters."""
        metrics = InMemoryBlobStoreMetricsStore()
        metrics.record_create(10)
        metrics.remove()

        assert metrics.get_metrics().blob_count == 0


class TestSpaceUsedQuotaService:
    """Tests for SpaceUsedQuotaService."""

    @staticmethod
    def _store(total_size: int) -> MagicMock:
        store = MagicMock()
        store.name = "test-store"
        store.metrics.return_value = BlobStoreMetrics(blob_count=1, total_size=total_size)
        return store

    def test_negative_limit(self):
        """A negative limit is invalid."""
        with pytest.raises(ValueError):
            SpaceUsedQuotaService(-1)

    def test_within_limit(self):
        """Usage at the limit is not a violation."""
        result = SpaceUsedQuotaService(100).check_quota(self._store(100))

        assert result.is_violation is False
        assert result.store_name == "test-store"

    def test_over_limit(self):
        """Usage above the limit is a violation."""
        result = SpaceUsedQuotaService(100).check_quota(self._store(101))

        assert result.is_violation is True
        assert "101" in result.message

    def test_against_blob_store(self, blob_store):
        """The quota reads the store's own metrics."""
        blob_store.create(io.BytesIO(b"x" * 20), {BLOB_NAME_HEADER: "a"})

        assert SpaceUsedQuotaService(10).check_quota(blob_store).is_violation is True
        assert SpaceUsedQuotaService(20).check_quota(blob_store).is_violation is False
