"""Decoded multipart entities. Created per request, immutable once built."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import ClassVar, NamedTuple

from app.core.errors import NoBoundaryFound

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_FILE_FIELD = "files"


class PartKind(StrEnum):
    """Classification of a decoded part."""

    FIELD = "field"
    FILE = "file"


class SkipReason(StrEnum):
    """Why a raw part was dropped from the decoded result."""

    MISSING_SEPARATOR = "missing_separator"
    MISSING_NAME = "missing_name"


class PartRange(NamedTuple):
    """Byte offsets of one raw part inside the request body, end exclusive."""

    start: int
    end: int


@dataclass(frozen=True, slots=True)
class RawRequestBody:
    """Complete request bytes plus the boundary token that frames them."""

    data: bytes
    boundary: bytes

    def __post_init__(self) -> None:
        if not self.boundary or b"\r" in self.boundary or b"\n" in self.boundary:
            raise NoBoundaryFound("Boundary token must be non-empty and contain no line breaks")

    def __len__(self) -> int:
        return len(self.data)

    def slice(self, part_range: PartRange) -> bytes:
        return self.data[part_range.start:part_range.end]


@dataclass(frozen=True, slots=True)
class Part:
    """One decoded unit of a multipart body."""

    name: str
    headers: Mapping[str, str]
    body: bytes

    kind: ClassVar[PartKind]

    def __post_init__(self) -> None:
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


@dataclass(frozen=True, slots=True)
class Field(Part):
    """A part without a filename: a plain text value."""

    kind: ClassVar[PartKind] = PartKind.FIELD

    @property
    def value(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True, slots=True)
class FileRecord(Part):
    """A part carrying an uploaded attachment."""

    filename: str
    content_type: str = DEFAULT_CONTENT_TYPE

    kind: ClassVar[PartKind] = PartKind.FILE

    @property
    def size(self) -> int:
        return len(self.body)


@dataclass(frozen=True, slots=True)
class DecodeSkip:
    """Returned instead of a part when one raw part is malformed."""

    reason: SkipReason
