"""Test fixtures for internship-intake-api unit tests."""

from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass, field

import pytest
from robyn.testing import TestClient

from app.core.lifespan import State
from app.main import app
from app.services.intake import ApplicationIntake
from app.services.stores import MemoryBlobStore, MemoryDocumentStore, Stores
from app.services.writer import BackgroundWriter

BOUNDARY = "----intakeBoundary7MA4YWxkTrZu0gW"


# -----------------------------------------------------------------------------
# Mock classes for Robyn Request
# -----------------------------------------------------------------------------


@dataclass
class MockHeaders:
    """Mock Headers object for Robyn Request. Keys are case-insensitive."""

    _data: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._data = {key.lower(): value for key, value in self._data.items()}

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key.lower(), default)

    def set(self, key: str, value: str) -> None:
        self._data[key.lower()] = value

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key.lower()] = value


@dataclass
class MockRequest:
    """Mock Request object for Robyn.

    ``form_data`` and ``files`` mirror the maps Robyn fills when it splits a
    multipart body before the handler runs.
    """

    body: bytes | str = b""
    headers: MockHeaders = field(default_factory=MockHeaders)
    method: str = "POST"
    path: str = "/applications"
    ip_addr: str | None = "203.0.113.7"
    form_data: dict[str, str] = field(default_factory=dict)
    files: dict[str, bytes] = field(default_factory=dict)


# -----------------------------------------------------------------------------
# Multipart helpers
# -----------------------------------------------------------------------------


def _encode_multipart(
    fields: Iterable[tuple[str, str]] = (),
    files: Iterable[tuple[str, str, str | None, bytes]] = (),
    boundary: str = BOUNDARY,
) -> bytes:
    """Encode fields and (name, filename, content_type, data) files as a browser would."""
    delimiter = f"--{boundary}".encode()
    chunks: list[bytes] = []

    for name, value in fields:
        chunks += [
            delimiter,
            b"\r\n",
            f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode(),
            value.encode(),
            b"\r\n",
        ]

    for name, filename, content_type, data in files:
        headers = f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
        if content_type:
            headers += f"Content-Type: {content_type}\r\n"
        chunks += [delimiter, b"\r\n", headers.encode(), b"\r\n", data, b"\r\n"]

    chunks += [delimiter, b"--\r\n"]
    return b"".join(chunks)


def _multipart_content_type(boundary: str = BOUNDARY) -> str:
    return f"multipart/form-data; boundary={boundary}"


async def _stream_of(*chunks: bytes) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


@pytest.fixture
def boundary() -> str:
    return BOUNDARY


@pytest.fixture
def encode_multipart():
    """Encoder building a browser-style multipart body."""
    return _encode_multipart


@pytest.fixture
def multipart_content_type():
    return _multipart_content_type


@pytest.fixture
def stream_of():
    """Factory turning byte chunks into an async body stream."""
    return _stream_of


@pytest.fixture
def valid_fields() -> dict[str, str]:
    """A complete, valid set of application fields."""
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "phone": "+44 20 7946 0000",
        "university": "University of London",
        "major": "Mathematics",
        "graduationDate": "2027-06",
        "position": "Backend Intern",
        "availability": "Summer 2027",
        "motivation": "I want to build analytical engines.",
        "terms": "true",
    }


# -----------------------------------------------------------------------------
# State and intake fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def test_state() -> State:
    """Create a test state container."""
    return State()


@pytest.fixture
def stores() -> Stores:
    return Stores(documents=MemoryDocumentStore(), blobs=MemoryBlobStore())


@pytest.fixture
def writer() -> BackgroundWriter:
    return BackgroundWriter()


@pytest.fixture
def intake(stores: Stores, writer: BackgroundWriter) -> ApplicationIntake:
    return ApplicationIntake(stores, writer, collection="applications")


@pytest.fixture
def global_dependencies(test_state: State, stores: Stores, writer: BackgroundWriter, intake: ApplicationIntake) -> dict:
    """Setup global dependencies for tests."""
    test_state.stores = stores
    test_state.writer = writer
    test_state.intake = intake
    yield {"state": test_state}
    test_state.clear()


@pytest.fixture
def make_mock_request():
    """Factory fixture to create mock requests."""

    def _make(
        body: bytes | str = b"",
        headers: dict | None = None,
        method: str = "POST",
        form_data: dict | None = None,
        files: dict | None = None,
    ) -> MockRequest:
        return MockRequest(
            body=body,
            headers=MockHeaders(dict(headers or {})),
            method=method,
            form_data=dict(form_data or {}),
            files=dict(files or {}),
        )

    return _make


@pytest.fixture
def make_multipart_request(make_mock_request):
    """Factory fixture building a multipart/form-data POST request."""

    def _make(fields=(), files=(), boundary: str = BOUNDARY) -> MockRequest:
        body = _encode_multipart(fields, files, boundary)
        return make_mock_request(body=body, headers={"Content-Type": _multipart_content_type(boundary)})

    return _make


@pytest.fixture
def make_parsed_request(make_mock_request):
    """Factory fixture building a multipart POST the way Robyn hands it over.

    Robyn has already split the body into ``form_data`` and ``files`` and
    leaves only the last part's payload in ``body``.
    """

    def _make(form_data: dict | None = None, files: dict | None = None, boundary: str = BOUNDARY) -> MockRequest:
        form_data = dict(form_data or {})
        files = dict(files or {})
        last_part = next(reversed([*form_data.values(), *files.values()]), b"")
        return make_mock_request(
            body=last_part,
            headers={"Content-Type": _multipart_content_type(boundary)},
            form_data=form_data,
            files=files,
        )

    return _make


# -----------------------------------------------------------------------------
# HTTP client
# -----------------------------------------------------------------------------


@pytest.fixture
def http_client(global_dependencies: dict):
    """Robyn TestClient over the real app, with test stores injected.

    The client drives handlers on its own event loop, so tests using it are sync.
    """
    app.inject_global(**global_dependencies)
    with TestClient(app) as client:
        yield client
