"""Document-store and blob-store collaborators used to persist applications."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import orjson

from app.core.errors import StoreError
from app.core.logger import LogIcon, logger


class BaseDocumentStore(ABC):
    """Keyed JSON document storage grouped in collections."""

    @abstractmethod
    async def put(self, collection: str, document_id: str, document: dict) -> None:
        """Create or replace a document."""
        ...


class BaseBlobStore(ABC):
    """Binary object storage addressed by path."""

    @abstractmethod
    async def put(self, path: str, data: bytes, content_type: str) -> str:
        """Store bytes under a path and return a locator for retrieving them."""
        ...


class MemoryDocumentStore(BaseDocumentStore):
    """Process-local document store, mostly for development and tests."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict]] = {}

    async def put(self, collection: str, document_id: str, document: dict) -> None:
        self.collections.setdefault(collection, {})[document_id] = document

    def get(self, collection: str, document_id: str) -> dict | None:
        return self.collections.get(collection, {}).get(document_id)


class MemoryBlobStore(BaseBlobStore):
    """Process-local blob store, mostly for development and tests."""

    def __init__(self) -> None:
        self.blobs: dict[str, tuple[bytes, str]] = {}

    async def put(self, path: str, data: bytes, content_type: str) -> str:
        self.blobs[path] = (data, content_type)
        return f"memory://{path}"


class LocalDocumentStore(BaseDocumentStore):
    """Stores each document as ``<root>/<collection>/<id>.json``."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _write(self, collection: str, document_id: str, document: dict) -> None:
        target = self.root / collection / f"{document_id}.json"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(orjson.dumps(document, option=orjson.OPT_INDENT_2))

    async def put(self, collection: str, document_id: str, document: dict) -> None:
        try:
            await asyncio.to_thread(self._write, collection, document_id, document)
        except (OSError, orjson.JSONEncodeError) as ex:
            raise StoreError(f"Failed to write {collection}/{document_id}: {ex}") from ex


class LocalBlobStore(BaseBlobStore):
    """Stores blobs as files under a root directory; locators are file URIs."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _write(self, path: str, data: bytes) -> Path:
        target = (self.root / path).resolve()
        if not target.is_relative_to(self.root.resolve()):
            raise StoreError(f"Blob path escapes the store root: {path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return target

    async def put(self, path: str, data: bytes, content_type: str) -> str:
        try:
            target = await asyncio.to_thread(self._write, path, data)
        except OSError as ex:
            raise StoreError(f"Failed to upload {path}: {ex}") from ex
        return target.as_uri()


@dataclass(frozen=True, slots=True)
class Stores:
    """The pair of stores an intake service writes to."""

    documents: BaseDocumentStore
    blobs: BaseBlobStore


def create_stores(backend: Literal["memory", "local"], root: Path | None = None) -> Stores:
    """Build the configured store backend."""
    match backend:
        case "memory":
            stores = Stores(documents=MemoryDocumentStore(), blobs=MemoryBlobStore())
        case "local" if root is not None:
            stores = Stores(documents=LocalDocumentStore(root / "documents"), blobs=LocalBlobStore(root / "blobs"))
        case _:
            raise ValueError(f"Cannot build store backend {backend!r} (root={root})")

    logger.info("Stores ready", icon=LogIcon.DATABASE, backend=backend)
    return stores
