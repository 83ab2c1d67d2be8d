"""Shared fixtures for the blob store tests."""

import pytest

from s3blobstore.application.services.blob_store import S3BlobStore
from s3blobstore.application.services.metrics import InMemoryBlobStoreMetricsStore
from s3blobstore.domain.value_objects.configuration import BlobStoreConfiguration
from tests.fakes import FakeObjectStorage


@pytest.fixture
def storage() -> FakeObjectStorage:
    """Empty in-memory object storage."""
    return FakeObjectStorage()


@pytest.fixture
def config() -> BlobStoreConfiguration:
    """Configuration pointing at the test bucket."""
    return BlobStoreConfiguration(name="test-store", bucket="mybucket")


@pytest.fixture
def metrics_store() -> InMemoryBlobStoreMetricsStore:
    return InMemoryBlobStoreMetricsStore()


@pytest.fixture
def new_blob_store(storage, metrics_store) -> S3BlobStore:
    """Blob store in the NEW state, wired to the fake storage."""
    return S3BlobStore(storage_factory=lambda _config: storage, metrics_store=metrics_store)


@pytest.fixture
def blob_store(new_blob_store, config) -> S3BlobStore:
    """Blob store that has been initialized and started."""
    new_blob_store.init(config)
    new_blob_store.start()
    return new_blob_store
