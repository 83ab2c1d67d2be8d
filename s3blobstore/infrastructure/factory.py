"""Builds blob stores and their collaborators from settings."""

from typing import Any, cast

from s3blobstore.application.ports import BlobStoreMetricsStore
from s3blobstore.application.services.blob_store import BlobStoreState, S3BlobStore
from s3blobstore.application.services.metrics import InMemoryBlobStoreMetricsStore
from s3blobstore.application.services.uploader import S3Uploader
from s3blobstore.commons.infrastructure.blob import MinioObjectStorage, ObjectStorageBase
from s3blobstore.commons.settings.models import Settings
from s3blobstore.commons.telemetry import configure_logging
from s3blobstore.domain.value_objects.configuration import BlobStoreConfiguration


def create_minio_storage(config: BlobStoreConfiguration) -> ObjectStorageBase:
    """Storage factory handing each blob store its own MinIO client."""
    return MinioObjectStorage(
        endpoint=config.endpoint,
        access_key=config.access_key,
        secret_key=config.secret_key.get_secret_value(),
        secure=config.use_ssl,
        region=config.region,
    )


class BlobStoreFactory:
    """Creates configured blob store instances.

    The store is built once per factory; ``open_blob_store`` additionally
    runs ``init`` and ``start`` with the configured bucket.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}

    def configure_logging(self) -> None:
        telemetry = self._settings.telemetry
        if telemetry.enabled:
            configure_logging(level=telemetry.log_level, format_type=telemetry.log_format)

    def get_configuration(self) -> BlobStoreConfiguration:
        return BlobStoreConfiguration.from_settings(self._settings.blob_store)

    def get_metrics_store(self) -> BlobStoreMetricsStore:
        if "metrics" not in self._instances:
            self._instances["metrics"] = InMemoryBlobStoreMetricsStore()
        return cast("BlobStoreMetricsStore", self._instances["metrics"])

    def get_uploader(self) -> S3Uploader:
        if "uploader" not in self._instances:
            store_settings = self._settings.blob_store
            self._instances["uploader"] = S3Uploader(
                multipart_threshold=store_settings.multipart_threshold_bytes,
                part_size=store_settings.multipart_part_size_bytes,
            )
        return cast("S3Uploader", self._instances["uploader"])

    def get_blob_store(self) -> S3BlobStore:
        """Get the (not yet initialized) blob store."""
        if "blob_store" not in self._instances:
            self._instances["blob_store"] = S3BlobStore(
                storage_factory=create_minio_storage,
                metrics_store=self.get_metrics_store(),
                uploader=self.get_uploader(),
            )
        return cast("S3BlobStore", self._instances["blob_store"])

    def open_blob_store(self) -> S3BlobStore:
        """Get the blob store, initialized and started."""
        store = self.get_blob_store()
        if store.state is BlobStoreState.NEW:
            store.init(self.get_configuration())
        if store.state in (BlobStoreState.INITIALIZED, BlobStoreState.STOPPED):
            store.start()
        return store


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: BlobStoreFactory | None = None


def get_factory(settings: Settings | None = None) -> BlobStoreFactory:
    """Get or create the blob store factory singleton.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = BlobStoreFactory(settings)

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
