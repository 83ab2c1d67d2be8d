"""Content uploads: single put for small known payloads, multipart otherwise."""

import hashlib
import io
from typing import Any, BinaryIO

from s3blobstore.commons.infrastructure.blob.base import ObjectStorageBase
from s3blobstore.commons.telemetry import get_logger, timed

MIB = 1024 * 1024
DEFAULT_MULTIPART_THRESHOLD = 5 * MIB
DEFAULT_PART_SIZE = 5 * MIB

logger = get_logger(__name__)


class MeteredStream(io.RawIOBase):
    """Read-through wrapper that counts bytes and computes their SHA-1."""

    def __init__(self, source: BinaryIO) -> None:
        super().__init__()
        self._source = source
        self._sha1 = hashlib.sha1()  # noqa: S324
        self.size = 0

    @property
    def sha1(self) -> str:
        return self._sha1.hexdigest()

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        data = self._source.read(len(buffer))
        if not data:
            return 0
        size = len(data)
        buffer[:size] = data
        self._sha1.update(data)
        self.size += size
        return size


class S3Uploader:
    """Writes content objects.

    A multipart upload is never left behind as a readable object: the
    storage client aborts it when a part fails.
    """

    def __init__(
        self,
        multipart_threshold: int = DEFAULT_MULTIPART_THRESHOLD,
        part_size: int = DEFAULT_PART_SIZE,
    ) -> None:
        """Initialize the uploader.

        Args:
            multipart_threshold: Known lengths below this go in one request.
            part_size: Size of each multipart part (S3 minimum is 5 MiB).
        """
        if part_size < DEFAULT_PART_SIZE:
            raise ValueError(f"part_size must be at least {DEFAULT_PART_SIZE} bytes")
        self.multipart_threshold = multipart_threshold
        self.part_size = part_size

    def is_single_part(self, content_length: int | None) -> bool:
        return content_length is not None and content_length < self.multipart_threshold

    @timed
    def upload(
        self,
        storage: ObjectStorageBase,
        bucket: str,
        key: str,
        stream: BinaryIO,
        content_length: int | None = None,
    ) -> None:
        """Upload ``stream`` to ``bucket/key``.

        Args:
            storage: Object storage client.
            bucket: Target bucket.
            key: Target key.
            stream: Content to upload.
            content_length: Byte count when known up front.
        """
        if self.is_single_part(content_length):
            logger.debug(
                "Uploading in a single request",
                extra={"key": key, "length": content_length},
            )
            storage.put_object(bucket, key, stream, content_length)  # type: ignore[arg-type]
            return

        logger.debug(
            "Uploading in parts",
            extra={"key": key, "length": content_length, "part_size": self.part_size},
        )
        storage.put_object(
            bucket,
            key,
            stream,
            -1 if content_length is None else content_length,
            part_size=self.part_size,
        )
