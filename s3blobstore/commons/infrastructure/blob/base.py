"""Abstract base class for object storage operations."""

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from typing import BinaryIO

from minio.lifecycleconfig import LifecycleConfig

# Backend error codes meaning "the bucket still holds objects"
BUCKET_NOT_EMPTY_CODES = frozenset({"BucketNotEmpty"})

# Backend error codes meaning "no such key/bucket"
NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "NoSuchObject"})


class ObjectStorageError(Exception):
    """A backend call failed with a machine-readable error code."""

    def __init__(self, code: str | None, message: str = "") -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}" if code else message)

    @property
    def is_bucket_not_empty(self) -> bool:
        """Whether the backend refused because foreign objects remain."""
        return self.code in BUCKET_NOT_EMPTY_CODES


class ObjectNotFoundError(ObjectStorageError):
    """Raised when a key or bucket does not exist."""

    def __init__(self, bucket: str, key: str | None = None, code: str = "NoSuchKey") -> None:
        self.bucket = bucket
        self.key = key
        target = f"{bucket}/{key}" if key else bucket
        super().__init__(code, f"Object not found: {target}")


class ObjectStorageClientError(ObjectStorageError):
    """The client could not complete the call (connectivity, protocol, ...)."""

    def __init__(self, message: str) -> None:
        super().__init__(None, message)


class ObjectStorageBase(ABC):
    """Thin synchronous client over an S3-compatible object store.

    Implementations surface backend failures as ObjectStorageError without
    interpreting the error code; callers classify.
    """

    @abstractmethod
    def bucket_exists(self, bucket: str) -> bool:
        """Check whether a bucket exists."""

    @abstractmethod
    def create_bucket(self, bucket: str) -> None:
        """Create a bucket."""

    @abstractmethod
    def delete_bucket(self, bucket: str) -> None:
        """Delete a bucket. Fails with a bucket-not-empty code if objects remain."""

    @abstractmethod
    def get_lifecycle(self, bucket: str) -> LifecycleConfig | None:
        """Get the bucket's lifecycle configuration, None if it has none."""

    @abstractmethod
    def set_lifecycle(self, bucket: str, config: LifecycleConfig | None) -> None:
        """Replace the bucket's lifecycle configuration.

        A None config, or one without rules, removes the policy.
        """

    @abstractmethod
    def object_exists(self, bucket: str, key: str) -> bool:
        """Check whether an object exists."""

    @abstractmethod
    def get_object(self, bucket: str, key: str) -> BinaryIO:
        """Open an object for reading.

        Raises:
            ObjectNotFoundError: If the object doesn't exist.
        """

    @abstractmethod
    def put_object(
        self,
        bucket: str,
        key: str,
        data: BinaryIO,
        length: int,
        *,
        part_size: int = 0,
        content_type: str = "application/octet-stream",
    ) -> None:
        """Write an object.

        Args:
            bucket: Target bucket name.
            key: Object key.
            data: Readable stream.
            length: Byte count, or -1 when unknown.
            part_size: Multipart part size. Zero lets the client decide and
                is only valid with a known length.
            content_type: MIME type stored with the object.
        """

    @abstractmethod
    def copy_object(self, bucket: str, source_key: str, target_key: str) -> None:
        """Server-side copy within one bucket."""

    @abstractmethod
    def delete_object(self, bucket: str, key: str) -> None:
        """Delete an object. Deleting a missing key is not an error."""

    @abstractmethod
    def set_object_tags(self, bucket: str, key: str, tags: Mapping[str, str]) -> None:
        """Replace an object's tag set. An empty mapping clears all tags."""

    @abstractmethod
    def list_objects(self, bucket: str, prefix: str) -> Iterator[str]:
        """Lazily list keys under a prefix, following pagination as it goes."""
