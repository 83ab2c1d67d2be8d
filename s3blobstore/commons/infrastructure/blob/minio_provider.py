"""MinIO implementation of object storage."""

import io
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, BinaryIO

from minio import Minio
from minio.commonconfig import CopySource, Tags
from minio.error import MinioException, S3Error
from minio.lifecycleconfig import LifecycleConfig
from urllib3.exceptions import HTTPError

from s3blobstore.commons.infrastructure.blob.base import (
    NOT_FOUND_CODES,
    ObjectNotFoundError,
    ObjectStorageBase,
    ObjectStorageClientError,
    ObjectStorageError,
)


@contextmanager
def translate_errors(bucket: str, key: str | None = None) -> Iterator[None]:
    """Re-raise MinIO and transport exceptions as ObjectStorageError."""
    try:
        yield
    except S3Error as e:
        if e.code in NOT_FOUND_CODES:
            raise ObjectNotFoundError(bucket, key, code=e.code) from e
        raise ObjectStorageError(e.code, str(e)) from e
    except (MinioException, HTTPError) as e:
        raise ObjectStorageClientError(f"{type(e).__name__}: {e}") from e


class MinioObjectStream(io.RawIOBase):
    """Readable stream over a MinIO response that releases the connection on close."""

    def __init__(self, response: Any, bucket: str, key: str) -> None:
        super().__init__()
        self._response = response
        self._bucket = bucket
        self._key = key

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        with translate_errors(self._bucket, self._key):
            data = self._response.read(len(buffer))
        size = len(data)
        buffer[:size] = data
        return size

    def close(self) -> None:
        if not self.closed:
            try:
                self._response.close()
                self._response.release_conn()
            finally:
                super().close()


class MinioObjectStorage(ObjectStorageBase):
    """MinIO implementation of object storage.

    Works with both MinIO and AWS S3.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        secure: bool = False,
        region: str | None = None,
    ) -> None:
        """Initialize MinIO client.

        Args:
            endpoint: MinIO/S3 endpoint (e.g., "localhost:9000").
            access_key: Access key ID.
            secret_key: Secret access key.
            secure: Use HTTPS connection.
            region: AWS region (optional, for S3).
        """
        self._client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self._endpoint = endpoint

    def bucket_exists(self, bucket: str) -> bool:
        with translate_errors(bucket):
            return bool(self._client.bucket_exists(bucket))

    def create_bucket(self, bucket: str) -> None:
        with translate_errors(bucket):
            self._client.make_bucket(bucket)

    def delete_bucket(self, bucket: str) -> None:
        with translate_errors(bucket):
            self._client.remove_bucket(bucket)

    def get_lifecycle(self, bucket: str) -> LifecycleConfig | None:
        with translate_errors(bucket):
            try:
                return self._client.get_bucket_lifecycle(bucket)
            except S3Error as e:
                if e.code == "NoSuchLifecycleConfiguration":
                    return None
                raise

    def set_lifecycle(self, bucket: str, config: LifecycleConfig | None) -> None:
        with translate_errors(bucket):
            if config is None or not config.rules:
                self._client.delete_bucket_lifecycle(bucket)
            else:
                self._client.set_bucket_lifecycle(bucket, config)

    def object_exists(self, bucket: str, key: str) -> bool:
        try:
            with translate_errors(bucket, key):
                self._client.stat_object(bucket, key)
        except ObjectNotFoundError:
            return False
        return True

    def get_object(self, bucket: str, key: str) -> BinaryIO:
        with translate_errors(bucket, key):
            response = self._client.get_object(bucket, key)
        return io.BufferedReader(MinioObjectStream(response, bucket, key))  # type: ignore[return-value]

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
        # The client aborts its multipart upload when any part fails
        with translate_errors(bucket, key):
            self._client.put_object(
                bucket_name=bucket,
                object_name=key,
                data=data,
                length=length,
                part_size=part_size,
                content_type=content_type,
            )

    def copy_object(self, bucket: str, source_key: str, target_key: str) -> None:
        with translate_errors(bucket, source_key):
            self._client.copy_object(bucket, target_key, CopySource(bucket, source_key))

    def delete_object(self, bucket: str, key: str) -> None:
        with translate_errors(bucket, key):
            self._client.remove_object(bucket, key)

    def set_object_tags(self, bucket: str, key: str, tags: Mapping[str, str]) -> None:
        with translate_errors(bucket, key):
            if not tags:
                self._client.delete_object_tags(bucket, key)
                return
            tag_set = Tags.new_object_tags()
            tag_set.update(tags)
            self._client.set_object_tags(bucket, key, tag_set)

    def list_objects(self, bucket: str, prefix: str) -> Iterator[str]:
        with translate_errors(bucket, prefix):
            for obj in self._client.list_objects(bucket, prefix=prefix, recursive=True):
                if obj.object_name:
                    yield obj.object_name
