"""JSON submissions: form fields as members plus base64-encoded attachments."""

from collections.abc import AsyncIterable
from typing import Annotated, Any

import orjson
from pydantic import Base64Bytes, BaseModel, ConfigDict, StringConstraints, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from app.core.errors import InvalidJsonBody, TooManyFiles
from app.core.logger import LogIcon, logger
from app.core.settings import settings as st
from app.models.core import FormData
from app.models.multipart import DEFAULT_CONTENT_TYPE, DEFAULT_FILE_FIELD, Field, FileRecord
from app.multipart.collector import collect_bytes
from app.multipart.form import FormLimits

FILES_MEMBER = "files"


class JsonAttachment(BaseModel):
    """One attachment inside the ``files`` array of a JSON submission."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = DEFAULT_FILE_FIELD
    filename: Annotated[str, StringConstraints(min_length=1)]
    content_type: str = DEFAULT_CONTENT_TYPE
    data: Base64Bytes

    @field_validator("data", mode="before")
    @classmethod
    def strip_data_url(cls, value: Any) -> Any:
        """Accept ``data:<type>;base64,<payload>`` URLs as well as bare base64."""
        if isinstance(value, str) and value.startswith("data:") and "," in value:
            return value.split(",", 1)[1]
        return value

    def to_record(self) -> FileRecord:
        return FileRecord(
            name=self.name,
            headers={"content-type": self.content_type},
            body=self.data,
            filename=self.filename,
            content_type=self.content_type,
        )


JsonAttachments = TypeAdapter(list[JsonAttachment])


def render_value(value: Any) -> str:
    """Render a JSON member the way a form field would carry it."""
    match value:
        case bool():
            return "true" if value else "false"
        case str():
            return value
        case int() | float():
            return str(value)
        case _:
            return orjson.dumps(value).decode()


def parse_json_form(data: bytes, *, max_files: int = st.MULTIPART_MAX_FILES) -> FormData:
    """Decode a JSON object body into the same shape as a multipart form.

    Raises:
        InvalidJsonBody: Body is not a JSON object or an attachment is invalid.
        TooManyFiles: More than ``max_files`` attachments were sent.
    """
    try:
        payload = orjson.loads(data)
    except orjson.JSONDecodeError as ex:
        raise InvalidJsonBody(f"Body is not valid JSON: {ex}") from ex

    if not isinstance(payload, dict):
        raise InvalidJsonBody("JSON body must be an object")

    raw_files = payload.pop(FILES_MEMBER, None) or []
    try:
        attachments = JsonAttachments.validate_python(raw_files)
    except ValidationError as ex:
        raise InvalidJsonBody(f"Invalid attachment: {ex.errors()[0]['msg']}") from ex

    if len(attachments) > max_files:
        raise TooManyFiles(f"At most {max_files} files are accepted")

    parts: list[Field | FileRecord] = [
        Field(name=name, headers={}, body=render_value(value).encode("utf-8"))
        for name, value in payload.items()
        if value is not None
    ]
    parts.extend(attachment.to_record() for attachment in attachments)
    return FormData(parts)


async def read_json_form(stream: AsyncIterable[bytes], limits: FormLimits | None = None) -> FormData:
    """Read and decode a JSON submission body from a byte stream."""
    limits = limits or FormLimits.from_settings()
    data = await collect_bytes(
        stream,
        max_bytes=limits.max_bytes,
        idle_timeout=limits.idle_timeout,
        total_timeout=limits.total_timeout,
    )
    form = parse_json_form(data, max_files=limits.max_files)
    logger.info("JSON form decoded", icon=LogIcon.JSON, fields=len(form.fields), files=len(form.files))
    return form
