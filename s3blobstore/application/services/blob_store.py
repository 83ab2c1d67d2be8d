"""S3-backed blob store."""

import io
import threading
from collections.abc import Callable, Iterator, Mapping
from enum import Enum
from typing import BinaryIO

from s3blobstore.application.ports import BlobStoreMetricsStore, BlobStoreUsageChecker
from s3blobstore.application.services.lifecycle import (
    DELETED_TAGS,
    needs_update,
    reconcile,
)
from s3blobstore.application.services.location import (
    DIRECT_PATH_ROOT,
    BlobIdLocationResolver,
)
from s3blobstore.application.services.metrics import InMemoryBlobStoreMetricsStore
from s3blobstore.application.services.uploader import MeteredStream, S3Uploader
from s3blobstore.commons.infrastructure.blob.base import (
    ObjectNotFoundError,
    ObjectStorageBase,
    ObjectStorageError,
)
from s3blobstore.commons.telemetry import LogContext, get_logger
from s3blobstore.domain.exceptions import (
    BlobStoreConfigurationError,
    BlobStoreStateError,
    BlobStoreStorageError,
    IncompatibleBlobStoreError,
)
from s3blobstore.domain.models.attributes import (
    BlobAttributes,
    dump_properties,
    load_properties,
)
from s3blobstore.domain.models.blob import Blob, BlobId
from s3blobstore.domain.models.headers import BLOB_NAME_HEADER
from s3blobstore.domain.models.metrics import BlobStoreMetrics
from s3blobstore.domain.value_objects.bucket_name import is_valid_bucket_name
from s3blobstore.domain.value_objects.configuration import BlobStoreConfiguration

CONTENT_PREFIX = "content"
BLOB_CONTENT_SUFFIX = ".bytes"
BLOB_ATTRIBUTE_SUFFIX = ".properties"

# Store marker at the bucket root
METADATA_FILENAME = "metadata.properties"
TYPE_KEY = "type"
TYPE_V1 = "s3/1"
S3_TYPE_PREFIX = "s3/"
FILE_TYPE_V1 = "file/1"

DRY_RUN_PREFIX = "[DRY RUN] "

StorageFactory = Callable[[BlobStoreConfiguration], ObjectStorageBase]

logger = get_logger(__name__)


class BlobStoreState(str, Enum):
    """Lifecycle phase of a blob store."""

    NEW = "new"
    INITIALIZED = "initialized"
    STARTED = "started"
    STOPPED = "stopped"


def is_compatible_store_type(store_type: str | None) -> bool:
    """Whether a bucket marker names a store this class can operate on."""
    if not store_type:
        return False
    return store_type.startswith(S3_TYPE_PREFIX) or store_type == FILE_TYPE_V1


class S3BlobStore:
    """Blob store keeping each blob as two objects in one bucket.

    ``content/{location}.bytes`` holds the payload and
    ``content/{location}.properties`` its attributes. Content is always
    written first, so an attributes object is never visible without its
    bytes; a crash in between leaves only an unreferenced content object.

    Lifecycle: ``init`` -> ``start`` -> blob operations -> ``stop``.
    Lifecycle transitions are serialized; blob operations may run
    concurrently once started. Concurrent delete/undelete of the same blob
    is last-writer-wins.
    """

    def __init__(
        self,
        storage_factory: StorageFactory,
        metrics_store: BlobStoreMetricsStore | None = None,
        uploader: S3Uploader | None = None,
        location_resolver: BlobIdLocationResolver | None = None,
    ) -> None:
        """Initialize the blob store.

        Args:
            storage_factory: Builds the object storage client for a configuration.
            metrics_store: Usage metrics sink. Defaults to in-process counters.
            uploader: Content uploader.
            location_resolver: Blob id to location mapping.
        """
        self._storage_factory = storage_factory
        self._metrics = metrics_store or InMemoryBlobStoreMetricsStore()
        self._uploader = uploader or S3Uploader()
        self._resolver = location_resolver or BlobIdLocationResolver()
        self._lock = threading.RLock()
        self._state = BlobStoreState.NEW
        self._config: BlobStoreConfiguration | None = None
        self._storage: ObjectStorageBase | None = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def state(self) -> BlobStoreState:
        return self._state

    @property
    def configuration(self) -> BlobStoreConfiguration:
        if self._config is None:
            raise BlobStoreStateError("read configuration", self._state.value)
        return self._config

    @property
    def name(self) -> str:
        return self.configuration.name

    @property
    def bucket(self) -> str:
        return self.configuration.bucket

    @property
    def storage(self) -> ObjectStorageBase:
        if self._storage is None:
            raise BlobStoreStateError("access storage", self._state.value)
        return self._storage

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def init(self, config: BlobStoreConfiguration) -> None:
        """Validate the configuration and prepare the bucket.

        Creates the bucket when missing and makes sure the soft-delete
        expiration rule is in place without touching other rules.

        Raises:
            BlobStoreConfigurationError: Invalid bucket name or unusable backend.
        """
        with self._lock:
            if self._state is not BlobStoreState.NEW:
                raise BlobStoreStateError("init", self._state.value)
            if not is_valid_bucket_name(config.bucket):
                raise BlobStoreConfigurationError(
                    config.name, f"invalid bucket name '{config.bucket}'"
                )

            with LogContext(blob_store=config.name, bucket=config.bucket):
                try:
                    storage = self._storage_factory(config)
                except ValueError as e:
                    raise BlobStoreConfigurationError(
                        config.name, f"unable to build storage client: {e}"
                    ) from e
                try:
                    self._prepare_bucket(storage, config)
                except ObjectStorageError as e:
                    raise BlobStoreConfigurationError(
                        config.name, f"unable to prepare bucket {config.bucket}: {e}"
                    ) from e

            self._config = config
            self._storage = storage
            self._state = BlobStoreState.INITIALIZED

    def _prepare_bucket(
        self, storage: ObjectStorageBase, config: BlobStoreConfiguration
    ) -> None:
        if storage.bucket_exists(config.bucket):
            existing = storage.get_lifecycle(config.bucket)
        else:
            logger.info("Creating bucket")
            storage.create_bucket(config.bucket)
            existing = None

        merged = reconcile(existing, config.expiration_days)
        if needs_update(existing, merged):
            logger.info(
                "Updating bucket lifecycle configuration",
                extra={"expiration_days": config.expiration_days},
            )
            storage.set_lifecycle(config.bucket, merged)

    def start(self) -> None:
        """Check the bucket's store marker and begin serving.

        Raises:
            IncompatibleBlobStoreError: The bucket holds a store of another type.
        """
        with self._lock:
            if self._state not in (BlobStoreState.INITIALIZED, BlobStoreState.STOPPED):
                raise BlobStoreStateError("start", self._state.value)

            with LogContext(blob_store=self.name, bucket=self.bucket):
                try:
                    metadata = self._read_properties(METADATA_FILENAME)
                    if metadata is None:
                        logger.info("Writing store marker for new blob store")
                        self._write_properties(METADATA_FILENAME, {TYPE_KEY: TYPE_V1})
                except ObjectStorageError as e:
                    raise BlobStoreStorageError(f"unable to read store marker: {e}") from e

                if metadata is not None:
                    store_type = metadata.get(TYPE_KEY)
                    if not is_compatible_store_type(store_type):
                        raise IncompatibleBlobStoreError(self.bucket, store_type)

            self._state = BlobStoreState.STARTED
            logger.info("Blob store started", extra={"blob_store": self.name})

    def stop(self) -> None:
        with self._lock:
            self._require_started("stop")
            self._state = BlobStoreState.STOPPED

    def _require_started(self, operation: str) -> None:
        if self._state is not BlobStoreState.STARTED:
            raise BlobStoreStateError(operation, self._state.value)

    # =========================================================================
    # Keys
    # =========================================================================

    def content_path(self, blob_id: BlobId) -> str:
        location = self._resolver.location(blob_id)
        return f"{CONTENT_PREFIX}/{location}{BLOB_CONTENT_SUFFIX}"

    def attribute_path(self, blob_id: BlobId) -> str:
        location = self._resolver.location(blob_id)
        return f"{CONTENT_PREFIX}/{location}{BLOB_ATTRIBUTE_SUFFIX}"

    # =========================================================================
    # Blob operations
    # =========================================================================

    def create(
        self,
        stream: BinaryIO,
        headers: Mapping[str, str],
        content_length: int | None = None,
    ) -> Blob:
        """Store a new blob.

        Args:
            stream: Content to store.
            headers: Creation headers; must include the blob name. A
                direct-path header routes the blob to its caller-chosen path.
            content_length: Byte count when known up front.

        Returns:
            The stored blob.

        Raises:
            ValueError: The blob name header is missing.
            BlobStoreStorageError: Either write failed.
        """
        self._require_started("create")
        if not headers.get(BLOB_NAME_HEADER):
            raise ValueError(f"Header {BLOB_NAME_HEADER} is required")

        blob_id = self._resolver.from_headers(headers)
        content_key = self.content_path(blob_id)
        attribute_key = self.attribute_path(blob_id)
        metered = MeteredStream(stream)

        with LogContext(blob_store=self.name, blob_id=str(blob_id)):
            logger.debug("Writing blob", extra={"key": content_key})
            try:
                self._uploader.upload(
                    self.storage, self.bucket, content_key, metered, content_length
                )
            except (ObjectStorageError, OSError) as e:
                raise BlobStoreStorageError(f"unable to write content: {e}", blob_id) from e

            attributes = BlobAttributes(
                headers=dict(headers),
                size=metered.size,
                sha1=metered.sha1,
            )
            try:
                self._write_attributes(attribute_key, attributes)
            except ObjectStorageError as e:
                self._delete_quietly(content_key)
                raise BlobStoreStorageError(
                    f"unable to write attributes: {e}", blob_id
                ) from e

        self._metrics.record_create(attributes.size)
        return self._blob(blob_id, attributes)

    def copy(self, blob_id: BlobId, headers: Mapping[str, str]) -> Blob:
        """Copy a blob's content server-side into a new blob.

        The new blob's headers are the source headers overlaid with ``headers``.
        """
        self._require_started("copy")
        source = self._read_attributes(blob_id)
        if source is None:
            raise BlobStoreStorageError("source blob not found", blob_id)

        merged_headers = {**source.headers, **headers}
        target_id = self._resolver.from_headers(headers)
        try:
            self.storage.copy_object(
                self.bucket, self.content_path(blob_id), self.content_path(target_id)
            )
            attributes = BlobAttributes(
                headers=merged_headers, size=source.size, sha1=source.sha1
            )
            self._write_attributes(self.attribute_path(target_id), attributes)
        except ObjectStorageError as e:
            raise BlobStoreStorageError(f"unable to copy to {target_id}: {e}", blob_id) from e

        self._metrics.record_create(attributes.size)
        return self._blob(target_id, attributes)

    def get(self, blob_id: BlobId, include_deleted: bool = False) -> Blob | None:
        """Look up a blob. Missing and soft-deleted blobs are None."""
        self._require_started("get")
        attributes = self._read_attributes(blob_id)
        if attributes is None:
            logger.debug("Attempt to access non-existent blob", extra={"blob_id": str(blob_id)})
            return None
        if attributes.deleted and not include_deleted:
            logger.debug("Attempt to access soft-deleted blob", extra={"blob_id": str(blob_id)})
            return None
        return self._blob(blob_id, attributes)

    def exists(self, blob_id: BlobId) -> bool:
        self._require_started("exists")
        try:
            return self.storage.object_exists(self.bucket, self.attribute_path(blob_id))
        except ObjectStorageError as e:
            raise BlobStoreStorageError(f"unable to check existence: {e}", blob_id) from e

    def get_blob_attributes(self, blob_id: BlobId) -> BlobAttributes | None:
        self._require_started("get_blob_attributes")
        return self._read_attributes(blob_id)

    def set_blob_attributes(self, blob_id: BlobId, attributes: BlobAttributes) -> None:
        self._require_started("set_blob_attributes")
        try:
            self._write_attributes(self.attribute_path(blob_id), attributes)
        except ObjectStorageError as e:
            raise BlobStoreStorageError(f"unable to write attributes: {e}", blob_id) from e

    def delete(self, blob_id: BlobId, reason: str) -> bool:
        """Soft-delete a blob.

        Records the reason and time in the attributes, then tags both the
        content and the attributes object as deleted so either key alone
        reveals the state. The bucket's lifecycle rule expires tagged objects.

        Returns:
            False if the blob does not exist, True otherwise.
        """
        self._require_started("delete")
        attributes = self._read_attributes(blob_id)
        if attributes is None:
            logger.debug("Attempt to delete non-existent blob", extra={"blob_id": str(blob_id)})
            return False

        attributes.mark_deleted(reason)
        attribute_key = self.attribute_path(blob_id)
        try:
            # Rewriting an object drops its tags, so tag after the write
            self._write_attributes(attribute_key, attributes)
            self.storage.set_object_tags(self.bucket, self.content_path(blob_id), DELETED_TAGS)
            self.storage.set_object_tags(self.bucket, attribute_key, DELETED_TAGS)
        except ObjectStorageError as e:
            raise BlobStoreStorageError(f"unable to soft-delete: {e}", blob_id) from e

        logger.debug("Soft-deleted blob", extra={"blob_id": str(blob_id), "reason": reason})
        return True

    def undelete(
        self,
        usage_checker: BlobStoreUsageChecker | None,
        blob_id: BlobId,
        attributes: BlobAttributes,
        dry_run: bool,
    ) -> bool:
        """Restore a soft-deleted blob that is still referenced.

        Args:
            usage_checker: Tells whether the blob is still in use.
            blob_id: Blob to restore.
            attributes: The blob's current attributes; cleared in place.
            dry_run: Report the outcome without changing anything.

        Returns:
            True when the blob is soft-deleted and still in use, whether or
            not anything was written.
        """
        self._require_started("undelete")
        log_prefix = DRY_RUN_PREFIX if dry_run else ""

        blob_name = attributes.blob_name
        if not blob_name:
            logger.error(
                f"{log_prefix}Property not present: @{BLOB_NAME_HEADER}",
                extra={"blob_id": str(blob_id), "key": self.attribute_path(blob_id)},
            )
            return False

        if not attributes.deleted or usage_checker is None:
            return False
        if not usage_checker.test(self, blob_id, blob_name):
            return False

        deleted_reason = attributes.deleted_reason
        if not dry_run:
            attributes.clear_deleted()
            attribute_key = self.attribute_path(blob_id)
            try:
                self._write_attributes(attribute_key, attributes)
                self.storage.set_object_tags(self.bucket, self.content_path(blob_id), {})
                self.storage.set_object_tags(self.bucket, attribute_key, {})
            except ObjectStorageError as e:
                raise BlobStoreStorageError(f"unable to undelete: {e}", blob_id) from e

        logger.warning(
            f"{log_prefix}Soft-deleted blob still in use, un-deleting blob",
            extra={"blob_id": str(blob_id), "deleted_reason": deleted_reason},
        )
        return True

    def delete_hard(self, blob_id: BlobId) -> bool:
        """Remove both objects of a blob immediately.

        Returns:
            False if the blob does not exist.
        """
        self._require_started("delete_hard")
        attributes = self._read_attributes(blob_id)
        if attributes is None:
            return False
        try:
            # Attributes first: a crash in between leaves only orphaned bytes
            self.storage.delete_object(self.bucket, self.attribute_path(blob_id))
            self.storage.delete_object(self.bucket, self.content_path(blob_id))
        except ObjectStorageError as e:
            raise BlobStoreStorageError(f"unable to hard-delete: {e}", blob_id) from e

        self._metrics.record_delete(attributes.size)
        logger.debug("Hard-deleted blob", extra={"blob_id": str(blob_id)})
        return True

    # =========================================================================
    # Store-wide operations
    # =========================================================================

    def remove(self) -> None:
        """Tear the store down: every blob, the marker and finally the bucket.

        A bucket that still holds foreign objects is left in place with a
        warning; the store counts as removed either way.

        Raises:
            BlobStoreStorageError: Any other backend failure.
        """
        with self._lock:
            self._require_started("remove")
            storage = self.storage
            with LogContext(blob_store=self.name, bucket=self.bucket):
                try:
                    for key in storage.list_objects(self.bucket, f"{CONTENT_PREFIX}/"):
                        storage.delete_object(self.bucket, key)
                    self._metrics.remove()
                    storage.delete_object(self.bucket, METADATA_FILENAME)
                except ObjectStorageError as e:
                    raise BlobStoreStorageError(f"unable to remove blob store: {e}") from e

                try:
                    storage.delete_bucket(self.bucket)
                except ObjectStorageError as e:
                    if not e.is_bucket_not_empty:
                        raise BlobStoreStorageError(f"unable to delete bucket: {e}") from e
                    logger.warning(
                        "Unable to delete non-empty bucket; the blob store has been removed",
                        extra={"error_code": e.code},
                    )
                self._state = BlobStoreState.STOPPED
                logger.info("Blob store removed")

    def is_writable(self) -> bool:
        """Whether the bucket is confirmed reachable. Never raises."""
        self._require_started("is_writable")
        try:
            return self.storage.bucket_exists(self.bucket)
        except Exception:
            logger.warning("Bucket existence probe failed", exc_info=True)
            return False

    def get_direct_path_blob_id_stream(self, path_prefix: str) -> Iterator[BlobId]:
        """Lazily list ids of direct-path blobs under ``path_prefix``.

        Order follows the backend listing, not creation order.
        """
        self._require_started("get_direct_path_blob_id_stream")
        return self._iter_blob_ids(f"{CONTENT_PREFIX}/{DIRECT_PATH_ROOT}/{path_prefix}")

    def get_blob_id_stream(self) -> Iterator[BlobId]:
        """Lazily list the ids of every blob in the store."""
        self._require_started("get_blob_id_stream")
        return self._iter_blob_ids(f"{CONTENT_PREFIX}/")

    def metrics(self) -> BlobStoreMetrics:
        return self._metrics.get_metrics()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _iter_blob_ids(self, prefix: str) -> Iterator[BlobId]:
        root = f"{CONTENT_PREFIX}/"
        try:
            for key in self.storage.list_objects(self.bucket, prefix):
                if key.endswith(BLOB_ATTRIBUTE_SUFFIX):
                    location = key[len(root) : -len(BLOB_ATTRIBUTE_SUFFIX)]
                    yield self._resolver.from_location(location)
        except ObjectStorageError as e:
            raise BlobStoreStorageError(f"unable to list {prefix}: {e}") from e

    def _blob(self, blob_id: BlobId, attributes: BlobAttributes) -> Blob:
        content_key = self.content_path(blob_id)

        def opener() -> BinaryIO:
            try:
                return self.storage.get_object(self.bucket, content_key)
            except ObjectStorageError as e:
                raise BlobStoreStorageError(f"unable to read content: {e}", blob_id) from e

        return Blob(id=blob_id, attributes=attributes, opener=opener)

    def _read_attributes(self, blob_id: BlobId) -> BlobAttributes | None:
        try:
            props = self._read_properties(self.attribute_path(blob_id))
        except ObjectStorageError as e:
            raise BlobStoreStorageError(f"unable to read attributes: {e}", blob_id) from e
        return None if props is None else BlobAttributes.from_properties(props)

    def _write_attributes(self, key: str, attributes: BlobAttributes) -> None:
        self._put_bytes(key, attributes.to_bytes())

    def _read_properties(self, key: str) -> dict[str, str] | None:
        try:
            stream = self.storage.get_object(self.bucket, key)
        except ObjectNotFoundError as e:
            # A missing bucket means the lookup itself failed
            if e.key is None or e.code == "NoSuchBucket":
                raise
            return None
        with stream:
            return load_properties(stream.read().decode("latin-1"))

    def _write_properties(self, key: str, props: Mapping[str, str]) -> None:
        self._put_bytes(key, dump_properties(props).encode("ascii"))

    def _put_bytes(self, key: str, data: bytes) -> None:
        self.storage.put_object(
            self.bucket, key, io.BytesIO(data), len(data), content_type="text/plain"
        )

    def _delete_quietly(self, key: str) -> None:
        try:
            self.storage.delete_object(self.bucket, key)
        except ObjectStorageError:
            logger.warning("Unable to clean up object", extra={"key": key}, exc_info=True)
