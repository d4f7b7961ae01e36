"""Boundary token extraction from a Content-Type header."""

import re

from beartype import beartype

from app.core.errors import NoBoundaryFound, UnsupportedMediaType

MULTIPART_FORM_DATA = "multipart/form-data"
BOUNDARY_PATTERN = re.compile(r"boundary=([^;]+)", re.IGNORECASE)


def media_type(content_type: str | None) -> str:
    """Return the lower-cased media type of a Content-Type value, without parameters."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


@beartype
def extract_boundary(content_type: str | None) -> bytes:
    """Extract the multipart boundary token from a Content-Type header.

    Raises:
        UnsupportedMediaType: If the header is not multipart/form-data.
        NoBoundaryFound: If the boundary parameter is missing or unusable.
    """
    if media_type(content_type) != MULTIPART_FORM_DATA:
        raise UnsupportedMediaType(f"Expected {MULTIPART_FORM_DATA}, got {content_type or 'nothing'}")

    match = BOUNDARY_PATTERN.search(content_type)
    if match is None:
        raise NoBoundaryFound("Content-Type header has no boundary parameter")

    boundary = match.group(1).strip().strip('"')
    if not boundary or "\r" in boundary or "\n" in boundary:
        raise NoBoundaryFound("Content-Type boundary parameter is empty or malformed")

    return boundary.encode("utf-8")
