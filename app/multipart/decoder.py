"""Decoding of a single raw multipart part into a Field or FileRecord."""

import re

from beartype import beartype

from app.models.multipart import DEFAULT_CONTENT_TYPE, DecodeSkip, Field, FileRecord, SkipReason

CRLF = b"\r\n"
HEADER_SEPARATOR = CRLF + CRLF

# name="value" or name=token, parameters separated by ";"
DISPOSITION_PARAM = re.compile(r';\s*([^\s=;]+)\s*=\s*(?:"([^"]*)"|([^\s;]*))')


def parse_headers(block: bytes) -> dict[str, str]:
    """Parse a part header block. Names are lower-cased, the last duplicate wins."""
    headers: dict[str, str] = {}
    for line in block.decode("utf-8", errors="replace").split("\r\n"):
        name, colon, value = line.partition(":")
        name = name.strip().lower()
        if colon and name:
            headers[name] = value.strip()
    return headers


def parse_disposition(value: str) -> dict[str, str]:
    """Extract the parameters of a Content-Disposition value.

    >>> parse_disposition('form-data; name="resume"; filename="cv.pdf"')
    {'name': 'resume', 'filename': 'cv.pdf'}
    """
    params: dict[str, str] = {}
    for match in DISPOSITION_PARAM.finditer(value):
        key, quoted, token = match.groups()
        params[key.lower()] = quoted if quoted is not None else token
    return params


@beartype
def decode_part(raw: bytes) -> Field | FileRecord | DecodeSkip:
    """Split one raw part into headers and body and classify it.

    Only the first blank line separates headers from body, so payload bytes
    that look like a header separator are kept as data. Exactly one trailing
    CRLF is framing and is removed from the body.
    """
    separator = raw.find(HEADER_SEPARATOR)
    if separator == -1:
        return DecodeSkip(SkipReason.MISSING_SEPARATOR)

    headers = parse_headers(raw[:separator])
    body = raw[separator + len(HEADER_SEPARATOR):]
    if body.endswith(CRLF):
        body = body[:-len(CRLF)]

    params = parse_disposition(headers.get("content-disposition", ""))
    name = params.get("name")
    if not name:
        return DecodeSkip(SkipReason.MISSING_NAME)

    filename = params.get("filename")
    if filename:
        return FileRecord(
            name=name,
            headers=headers,
            body=body,
            filename=filename,
            content_type=headers.get("content-type") or DEFAULT_CONTENT_TYPE,
        )

    return Field(name=name, headers=headers, body=body)
