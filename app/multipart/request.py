"""Reading a submission form out of a Robyn request."""

from robyn import Request

from app.core.errors import PayloadTooLarge
from app.models.core import FormData
from app.multipart.boundary import extract_boundary, media_type
from app.multipart.collector import iter_chunks
from app.multipart.form import FormLimits, read_multipart
from app.multipart.json_form import read_json_form
from app.multipart.parsed import form_from_parsed
from app.multipart.scanner import DASHES

JSON_MEDIA_TYPE = "application/json"


def request_bytes(request: Request) -> bytes:
    """Return the raw request body, whether Robyn exposed it as text or bytes."""
    body = request.body
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


def declared_length(request: Request) -> int | None:
    value = request.headers.get("content-length")
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def is_framed(body: bytes, boundary: bytes) -> bool:
    """Whether ``body`` still carries its ``--boundary`` delimiters."""
    return DASHES + boundary in body


async def read_request_form(request: Request, limits: FormLimits | None = None) -> FormData:
    """Decode a multipart/form-data or JSON submission body.

    Robyn splits multipart bodies into ``form_data`` and ``files`` before the
    handler runs and leaves a single part in ``body``. Such requests are built
    from those maps; a body that still carries its delimiters goes through the
    multipart decoder.

    Raises:
        MultipartError: Any request-fatal decode failure.
    """
    limits = limits or FormLimits.from_settings()
    length = declared_length(request)
    if length is not None and length > limits.max_bytes:
        raise PayloadTooLarge(f"Declared Content-Length {length} exceeds {limits.max_bytes} bytes")

    content_type = request.headers.get("content-type")
    body = request_bytes(request)

    if media_type(content_type) == JSON_MEDIA_TYPE:
        return await read_json_form(iter_chunks(body, limits.chunk_size), limits)

    boundary = extract_boundary(content_type)
    form_data = request.form_data or {}
    files = request.files or {}
    if not is_framed(body, boundary) and (form_data or files):
        return form_from_parsed(form_data, files, limits)

    return await read_multipart(iter_chunks(body, limits.chunk_size), content_type, limits)
