"""Binary-safe location of multipart parts inside a request body."""

from beartype import beartype

from app.core.errors import NoBoundaryFound
from app.core.logger import LogIcon, logger
from app.models.multipart import PartRange

CRLF = b"\r\n"
DASHES = b"--"


@beartype
def scan(body: bytes, boundary: bytes) -> list[PartRange]:
    """Return the byte range of every part framed by ``--boundary`` delimiters.

    Each range starts after the delimiter and one optional CRLF and ends at the
    start of the next delimiter, so it still carries the CRLF that precedes it.
    Scanning stops at the closing ``--boundary--``; the preamble and epilogue
    are ignored. A trailing part with no delimiter after it is dropped.

    Raises:
        NoBoundaryFound: If ``--boundary`` never occurs in ``body``.
    """
    delimiter = DASHES + boundary
    start = body.find(delimiter)
    if start == -1:
        raise NoBoundaryFound("Boundary delimiter not found in request body")

    ranges: list[PartRange] = []
    position = start
    while not body.startswith(DASHES, position + len(delimiter)):
        cursor = position + len(delimiter)
        if body.startswith(CRLF, cursor):
            cursor += len(CRLF)

        position = body.find(delimiter, cursor)
        if position == -1:
            logger.warning("Multipart body ends without a closing delimiter", icon=LogIcon.WARNING, parts=len(ranges))
            break

        ranges.append(PartRange(cursor, position))

    return ranges
