"""Multipart forms the server has already split into ``form_data`` and ``files``."""

import mimetypes
from collections.abc import Mapping

from app.core.errors import EmptyBody, PayloadTooLarge, TooManyFiles
from app.core.logger import LogIcon, logger
from app.models.core import FormData
from app.models.multipart import DEFAULT_CONTENT_TYPE, DEFAULT_FILE_FIELD, Field, FileRecord
from app.multipart.form import FormLimits


def guess_content_type(filename: str) -> str:
    content_type, _ = mimetypes.guess_type(filename, strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


def form_from_parsed(
    form_data: Mapping[str, str],
    files: Mapping[str, bytes],
    limits: FormLimits | None = None,
) -> FormData:
    """Build FormData from the field and file maps Robyn fills for multipart requests.

    Robyn keys files by filename and keeps neither the part name nor its
    headers, so every file is filed under ``files`` with a content type guessed
    from its extension. Fields come first, then files, each in map order.

    Raises:
        EmptyBody: Neither fields nor files were received.
        TooManyFiles: More than ``max_files`` files were received.
        PayloadTooLarge: Field values and file bodies together exceed ``max_bytes``.
    """
    limits = limits or FormLimits.from_settings()
    if not form_data and not files:
        raise EmptyBody("Multipart body has no fields or files")

    fields = [Field(name=name, headers={}, body=value.encode("utf-8")) for name, value in form_data.items()]

    records: list[FileRecord] = []
    for filename, data in files.items():
        if not filename:
            logger.warning("Skipping file without a filename", icon=LogIcon.WARNING, size=len(data))
            continue
        content_type = guess_content_type(filename)
        records.append(
            FileRecord(
                name=DEFAULT_FILE_FIELD,
                headers={"content-type": content_type},
                body=bytes(data),
                filename=filename,
                content_type=content_type,
            )
        )

    if len(records) > limits.max_files:
        raise TooManyFiles(f"At most {limits.max_files} files are accepted")

    size = sum(len(part.body) for part in fields) + sum(record.size for record in records)
    if size > limits.max_bytes:
        raise PayloadTooLarge(f"Request body exceeds {limits.max_bytes} bytes")

    logger.info("Parsed multipart form mapped", icon=LogIcon.FILE, fields=len(fields), files=len(records))
    return FormData([*fields, *records])
