"""Blob attributes and their ``.properties`` text encoding."""

import re
from collections.abc import Iterator, Mapping
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from s3blobstore.domain.models.headers import BLOB_NAME_HEADER

# Prefix marking a creation header among the stored properties
HEADER_PREFIX = "@"

CREATION_TIME_KEY = "creation-time"
SIZE_KEY = "size"
SHA1_KEY = "sha1"
DELETED_KEY = "deleted"
DELETED_REASON_KEY = "deleted-reason"
DELETED_AT_KEY = "deleted-at"

# Keys written by the local-filesystem store (``type=file/1``)
_LEGACY_KEYS = {
    "creationTime": CREATION_TIME_KEY,
    "deletedReason": DELETED_REASON_KEY,
    "deletedDateTime": DELETED_AT_KEY,
}

_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)
_SIMPLE_UNESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_SIMPLE_ESCAPES = {"\\": "\\\\", "\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}


def _escape(text: str, *, is_key: bool) -> str:
    out: list[str] = []
    for i, ch in enumerate(text):
        if ch in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[ch])
        elif ch in "=:#!":
            out.append("\\" + ch)
        elif ch == " " and (is_key or i == 0):
            out.append("\\ ")
        elif " " <= ch <= "~":
            out.append(ch)
        else:
            # Non-ASCII as UTF-16 code units, like java.util.Properties
            units = ch.encode("utf-16-be", "surrogatepass")
            for j in range(0, len(units), 2):
                out.append(f"\\u{int.from_bytes(units[j : j + 2], 'big'):04x}")
    return "".join(out)


def _unescape(text: str) -> str:
    def replace(match: re.Match[str]) -> str:
        token = match.group(1)
        if len(token) == 5 and token[0] == "u":
            return chr(int(token[1:], 16))
        return _SIMPLE_UNESCAPES.get(token, token)

    decoded = _ESCAPE_RE.sub(replace, text)
    return decoded.encode("utf-16-le", "surrogatepass").decode("utf-16-le")


def _logical_lines(text: str) -> Iterator[str]:
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip()
        if not pending and (not line or line[0] in "#!"):
            continue
        line = pending + line
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2:
            pending = line[:-1]
            continue
        pending = ""
        yield line
    if pending:
        yield pending


def _split_entry(line: str) -> tuple[str, str]:
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in "=:" or ch.isspace():
            break
        i += 1
    key, rest = line[:i], line[i:].lstrip()
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip()
    return key, rest


def load_properties(text: str) -> dict[str, str]:
    """Parse Java ``.properties`` text."""
    props: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_entry(line)
        props[_unescape(key)] = _unescape(value)
    return props


def dump_properties(props: Mapping[str, str], comment: str | None = None) -> str:
    """Render a mapping as Java ``.properties`` text, keys sorted."""
    lines = [f"#{comment}"] if comment else []
    lines.extend(
        f"{_escape(key, is_key=True)}={_escape(value, is_key=False)}"
        for key, value in sorted(props.items())
    )
    return "\n".join(lines) + "\n"


def _parse_timestamp(value: str) -> datetime:
    # The filesystem store wrote epoch milliseconds
    if value.isdigit():
        return datetime.fromtimestamp(int(value) / 1000, UTC)
    return datetime.fromisoformat(value)


class BlobAttributes(BaseModel):
    """Durable description of one blob, stored next to its content.

    The attributes object is written only after the content object, so its
    presence proves the bytes were persisted.
    """

    headers: dict[str, str] = Field(default_factory=dict)
    creation_time: datetime = Field(default_factory=lambda: datetime.now(UTC))
    size: int = Field(default=0, ge=0)
    sha1: str | None = None
    deleted: bool = False
    deleted_reason: str | None = None
    deleted_at: datetime | None = None

    @property
    def blob_name(self) -> str | None:
        return self.headers.get(BLOB_NAME_HEADER)

    def mark_deleted(self, reason: str, when: datetime | None = None) -> None:
        self.deleted = True
        self.deleted_reason = reason
        self.deleted_at = when or datetime.now(UTC)

    def clear_deleted(self) -> None:
        self.deleted = False
        self.deleted_reason = None
        self.deleted_at = None

    def to_properties(self) -> dict[str, str]:
        props = {f"{HEADER_PREFIX}{k}": v for k, v in self.headers.items()}
        props[CREATION_TIME_KEY] = self.creation_time.isoformat()
        props[SIZE_KEY] = str(self.size)
        if self.sha1:
            props[SHA1_KEY] = self.sha1
        if self.deleted:
            props[DELETED_KEY] = "true"
            if self.deleted_reason is not None:
                props[DELETED_REASON_KEY] = self.deleted_reason
            if self.deleted_at is not None:
                props[DELETED_AT_KEY] = self.deleted_at.isoformat()
        return props

    @classmethod
    def from_properties(cls, props: Mapping[str, str]) -> "BlobAttributes":
        values = {_LEGACY_KEYS.get(k, k): v for k, v in props.items()}
        headers = {
            k[len(HEADER_PREFIX) :]: v
            for k, v in values.items()
            if k.startswith(HEADER_PREFIX)
        }
        created = values.get(CREATION_TIME_KEY)
        deleted_at = values.get(DELETED_AT_KEY)
        return cls(
            headers=headers,
            creation_time=_parse_timestamp(created) if created else datetime.now(UTC),
            size=int(values.get(SIZE_KEY, "0")),
            sha1=values.get(SHA1_KEY),
            deleted=values.get(DELETED_KEY, "false").lower() == "true",
            deleted_reason=values.get(DELETED_REASON_KEY),
            deleted_at=_parse_timestamp(deleted_at) if deleted_at else None,
        )

    def to_bytes(self) -> bytes:
        return dump_properties(self.to_properties()).encode("ascii")

    @classmethod
    def from_bytes(cls, data: bytes) -> "BlobAttributes":
        return cls.from_properties(load_properties(data.decode("latin-1")))
