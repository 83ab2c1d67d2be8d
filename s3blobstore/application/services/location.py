"""Mapping between blob ids and storage locations."""

import hashlib
from collections.abc import Mapping

from s3blobstore.domain.models.blob import BlobId
from s3blobstore.domain.models.headers import BLOB_NAME_HEADER, DIRECT_PATH_BLOB_HEADER

DIRECT_PATH_ROOT = "directpath"

VOLUME_COUNT = 43
CHAPTER_COUNT = 47


class PermanentLocationStrategy:
    """Spreads generated ids over ``vol-NN/chap-NN`` directories.

    The shard is derived from a hash of the id and the id itself is the leaf,
    so two ids never share a location.
    """

    def location(self, blob_id: BlobId) -> str:
        digest = hashlib.sha256(blob_id.value.encode("utf-8")).digest()
        bucket = int.from_bytes(digest[:4], "big")
        volume = bucket % VOLUME_COUNT + 1
        chapter = (bucket // VOLUME_COUNT) % CHAPTER_COUNT + 1
        return f"vol-{volume:02d}/chap-{chapter:02d}/{blob_id.value}"


class DirectPathLocationStrategy:
    """Places caller-addressed blobs under ``directpath/`` unchanged."""

    def location(self, blob_id: BlobId) -> str:
        return f"{DIRECT_PATH_ROOT}/{blob_id.direct_path}"


class BlobIdLocationResolver:
    """Resolves blob ids to locations and back.

    Locations are relative to the store's content prefix; callers add the
    ``content/`` prefix and the ``.bytes``/``.properties`` suffix.
    """

    def __init__(self) -> None:
        self.permanent = PermanentLocationStrategy()
        self.direct_path = DirectPathLocationStrategy()

    def location(self, blob_id: BlobId) -> str:
        if blob_id.is_direct_path:
            return self.direct_path.location(blob_id)
        return self.permanent.location(blob_id)

    def from_headers(self, headers: Mapping[str, str]) -> BlobId:
        """Pick the id for a new blob from its creation headers."""
        if headers.get(DIRECT_PATH_BLOB_HEADER, "").lower() == "true":
            blob_name = headers.get(BLOB_NAME_HEADER)
            if not blob_name:
                raise ValueError(
                    f"Header {BLOB_NAME_HEADER} is required for direct-path blobs"
                )
            return BlobId.for_direct_path(blob_name)
        return BlobId.generate()

    def from_location(self, location: str) -> BlobId:
        """Recover the id stored at a location produced by ``location``."""
        direct_prefix = f"{DIRECT_PATH_ROOT}/"
        if location.startswith(direct_prefix):
            return BlobId.for_direct_path(location[len(direct_prefix) :])
        return BlobId(value=location.rsplit("/", 1)[-1])
