"""Unit tests for blob identity and the Blob value."""

import io

import pytest
from pydantic import ValidationError

from s3blobstore.domain.models.attributes import BlobAttributes
from s3blobstore.domain.models.blob import Blob, BlobId
from s3blobstore.domain.models.headers import BLOB_NAME_HEADER


class TestBlobId:
    """Tests for BlobId."""

    def test_generate_is_unique(self):
        """Generated ids differ."""
        assert BlobId.generate() != BlobId.generate()

    def test_equality_and_hash(self):
        """Ids compare and hash by value."""
        assert BlobId(value="abc") == BlobId(value="abc")
        assert len({BlobId(value="abc"), BlobId(value="abc")}) == 1

    def test_immutable(self):
        """Ids cannot be changed once created."""
        blob_id = BlobId(value="abc")

        with pytest.raises(ValidationError):
            blob_id.value = "def"

    def test_empty_rejected(self):
        """An id needs a value."""
        with pytest.raises(ValidationError):
            BlobId(value="")

    def test_direct_path(self):
        """Direct-path ids carry their path."""
        blob_id = BlobId.for_direct_path("foo/bar/myblob")

        assert str(blob_id) == "path$foo/bar/myblob"
        assert blob_id.is_direct_path
        assert blob_id.direct_path == "foo/bar/myblob"

    def test_permanent_has_no_direct_path(self):
        """A generated id is not a direct-path id."""
        blob_id = BlobId.generate()

        assert not blob_id.is_direct_path
        with pytest.raises(ValueError):
            _ = blob_id.direct_path


class TestBlob:
    """Tests for Blob."""

    def test_each_open_is_a_new_stream(self):
        """open_stream() calls the opener every time."""
        opened = []

        def opener():
            stream = io.BytesIO(b"data")
            opened.append(stream)
            return stream

        blob = Blob(
            id=BlobId(value="abc"),
            attributes=BlobAttributes(headers={BLOB_NAME_HEADER: "x"}, size=4),
            opener=opener,
        )

        assert blob.open_stream().read() == b"data"
        assert blob.open_stream().read() == b"data"
        assert len(opened) == 2
        assert blob.size == 4
        assert blob.headers[BLOB_NAME_HEADER] == "x"
