"""Blob identity and runtime blob value."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import BinaryIO
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from s3blobstore.domain.models.attributes import BlobAttributes

# Unique-string prefix marking an id addressed by a caller-chosen path
DIRECT_PATH_PREFIX = "path$"


class BlobId(BaseModel):
    """Immutable opaque blob identifier.

    Examples:
        >>> BlobId.generate().is_direct_path
        False
        >>> BlobId.for_direct_path("foo/bar/myblob").value
        'path$foo/bar/myblob'
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(min_length=1, description="Unique string form of the id")

    @classmethod
    def generate(cls) -> "BlobId":
        """Create a fresh random id."""
        return cls(value=str(uuid4()))

    @classmethod
    def for_direct_path(cls, path: str) -> "BlobId":
        """Create the id of a blob addressed by a caller-chosen path."""
        return cls(value=f"{DIRECT_PATH_PREFIX}{path}")

    @property
    def is_direct_path(self) -> bool:
        return self.value.startswith(DIRECT_PATH_PREFIX)

    @property
    def direct_path(self) -> str:
        """The caller-chosen path of a direct-path id."""
        if not self.is_direct_path:
            raise ValueError(f"Not a direct-path blob id: {self.value}")
        return self.value[len(DIRECT_PATH_PREFIX) :]

    def __str__(self) -> str:
        return self.value


@dataclass
class Blob:
    """A stored blob: id, attributes and a way to read its bytes.

    Every call to ``open_stream`` opens a new stream on the content object.
    """

    id: BlobId
    attributes: BlobAttributes
    opener: Callable[[], BinaryIO] = field(repr=False)

    @property
    def headers(self) -> Mapping[str, str]:
        return self.attributes.headers

    @property
    def size(self) -> int:
        return self.attributes.size

    def open_stream(self) -> BinaryIO:
        return self.opener()
