"""multipart/form-data request decoding: collect, scan, decode."""

from collections.abc import AsyncIterable
from dataclasses import dataclass

from app.core.errors import TooManyFiles
from app.core.logger import LogIcon, logger
from app.core.settings import settings as st
from app.models.core import FormData
from app.models.multipart import DecodeSkip, Field, FileRecord, RawRequestBody
from app.multipart.boundary import extract_boundary
from app.multipart.collector import collect
from app.multipart.decoder import decode_part
from app.multipart.scanner import scan


@dataclass(frozen=True, slots=True)
class FormLimits:
    """Size, count and time limits applied while reading one form body."""

    max_bytes: int = st.MULTIPART_MAX_BYTES
    max_files: int = st.MULTIPART_MAX_FILES
    idle_timeout: float = st.STREAM_IDLE_TIMEOUT
    total_timeout: float = st.STREAM_TOTAL_TIMEOUT
    chunk_size: int = st.STREAM_CHUNK_SIZE

    @classmethod
    def from_settings(cls) -> "FormLimits":
        return cls(
            max_bytes=st.MULTIPART_MAX_BYTES,
            max_files=st.MULTIPART_MAX_FILES,
            idle_timeout=st.STREAM_IDLE_TIMEOUT,
            total_timeout=st.STREAM_TOTAL_TIMEOUT,
            chunk_size=st.STREAM_CHUNK_SIZE,
        )


def parse_form(raw: RawRequestBody, *, max_files: int = st.MULTIPART_MAX_FILES) -> FormData:
    """Decode every part of a collected body, dropping malformed ones.

    Raises:
        NoBoundaryFound: The body never mentions its boundary.
        TooManyFiles: More than ``max_files`` file parts were decoded.
    """
    parts: list[Field | FileRecord] = []
    files = 0

    for index, part_range in enumerate(scan(raw.data, raw.boundary)):
        decoded = decode_part(raw.slice(part_range))
        if isinstance(decoded, DecodeSkip):
            logger.warning("Skipping malformed part", icon=LogIcon.WARNING, index=index, reason=decoded.reason)
            continue

        if isinstance(decoded, FileRecord):
            files += 1
            if files > max_files:
                raise TooManyFiles(f"At most {max_files} files are accepted")

        parts.append(decoded)

    return FormData(parts)


async def read_multipart(
    stream: AsyncIterable[bytes],
    content_type: str | None,
    limits: FormLimits | None = None,
) -> FormData:
    """Read and decode a multipart/form-data body from a byte stream."""
    limits = limits or FormLimits.from_settings()
    boundary = extract_boundary(content_type)
    raw = await collect(
        stream,
        boundary,
        max_bytes=limits.max_bytes,
        idle_timeout=limits.idle_timeout,
        total_timeout=limits.total_timeout,
    )
    form = parse_form(raw, max_files=limits.max_files)
    logger.info("Multipart form decoded", icon=LogIcon.FILE, fields=len(form.fields), files=len(form.files))
    return form
