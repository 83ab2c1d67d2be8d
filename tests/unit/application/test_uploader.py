"""Unit tests for the content uploader."""

import hashlib
import io
from unittest.mock import MagicMock

import pytest

from s3blobstore.application.services.uploader import (
    MIB,
    MeteredStream,
    S3Uploader,
)
from s3blobstore.commons.infrastructure.blob.base import ObjectStorageBase, ObjectStorageError


@pytest.fixture
def storage():
    return MagicMock(spec=ObjectStorageBase)


class TestMeteredStream:
    """Tests for MeteredStream."""

    def test_counts_and_hashes(self):
        """Bytes read through the stream are counted and hashed."""
        payload = b"a" * 10_000
        stream = MeteredStream(io.BytesIO(payload))

        assert stream.read() == payload
        assert stream.size == 10_000
        assert stream.sha1 == hashlib.sha1(payload).hexdigest()  # noqa: S324

    def test_partial_reads(self):
        """Only bytes actually read are accounted for."""
        stream = MeteredStream(io.BytesIO(b"hello world"))

        assert stream.read(5) == b"hello"
        assert stream.size == 5
        assert stream.sha1 == hashlib.sha1(b"hello").hexdigest()  # noqa: S324

    def test_empty(self):
        """An empty source yields size zero."""
        stream = MeteredStream(io.BytesIO(b""))

        assert stream.read() == b""
        assert stream.size == 0


class TestS3Uploader:
    """Tests for S3Uploader."""

    def test_rejects_small_part_size(self):
        """Parts below the S3 minimum are refused."""
        with pytest.raises(ValueError):
            S3Uploader(part_size=MIB)

    @pytest.mark.parametrize(
        ("content_length", "expected"),
        [(None, False), (0, True), (5 * MIB - 1, True), (5 * MIB, False), (50 * MIB, False)],
    )
    def test_is_single_part(self, content_length, expected):
        """Only known lengths below the threshold are sent in one request."""
        assert S3Uploader().is_single_part(content_length) is expected

    def test_single_part_upload(self, storage):
        """Small payloads use a plain put with the known length."""
        stream = io.BytesIO(b"data")

        S3Uploader().upload(storage, "bucket", "key", stream, content_length=4)

        storage.put_object.assert_called_once_with("bucket", "key", stream, 4)

    def test_unknown_length_upload(self, storage):
        """Unknown lengths stream in parts."""
        stream = io.BytesIO(b"data")

        S3Uploader(part_size=10 * MIB).upload(storage, "bucket", "key", stream)

        storage.put_object.assert_called_once_with(
            "bucket", "key", stream, -1, part_size=10 * MIB
        )

    def test_large_known_length_upload(self, storage):
        """Large known lengths are uploaded in parts with the length."""
        stream = io.BytesIO(b"data")

        S3Uploader(multipart_threshold=2).upload(storage, "bucket", "key", stream, 4)

        storage.put_object.assert_called_once_with("bucket", "key", stream, 4, part_size=5 * MIB)

    def test_failure_propagates(self, storage):
        """Backend failures are raised to the caller."""
        storage.put_object.side_effect = ObjectStorageError("InternalError", "boom")

        with pytest.raises(ObjectStorageError):
            S3Uploader().upload(storage, "bucket", "key", io.BytesIO(b"x"))
