"""Core models for request/response handling."""

from collections.abc import Iterable, Iterator

from app.models.multipart import Field, FileRecord


class FormData:
    """Ordered container for fields and files decoded from a form submission."""

    __slots__ = ("parts",)

    def __init__(self, parts: Iterable[Field | FileRecord] | None = None) -> None:
        self.parts: tuple[Field | FileRecord, ...] = tuple(parts or ())

    def __bool__(self) -> bool:
        return bool(self.parts)

    def __iter__(self) -> Iterator[Field | FileRecord]:
        return iter(self.parts)

    def __len__(self) -> int:
        return len(self.parts)

    def __repr__(self) -> str:
        return f"FormData(fields={list(self.fields)}, files={[f.filename for f in self.files]})"

    @property
    def fields(self) -> dict[str, str]:
        """Field values by name. On duplicate names the last one wins."""
        return {part.name: part.value for part in self.parts if isinstance(part, Field)}

    @property
    def files(self) -> list[FileRecord]:
        """Uploaded files in submission order."""
        return [part for part in self.parts if isinstance(part, FileRecord)]

    def get(self, name: str) -> str | FileRecord | None:
        """Get the last field value or file submitted under a name."""
        for part in reversed(self.parts):
            if part.name == name:
                return part.value if isinstance(part, Field) else part
        return None

    def getlist(self, name: str) -> list[str | FileRecord]:
        """Get every field value or file submitted under a name."""
        return [part.value if isinstance(part, Field) else part for part in self.parts if part.name == name]

    def keys(self) -> list[str]:
        """Get all part names, first occurrence order."""
        return list(dict.fromkeys(part.name for part in self.parts))
