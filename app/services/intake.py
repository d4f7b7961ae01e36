"""Application intake: validate a decoded form, shape the document, persist it."""

import math
import re
import secrets
import string
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime

from app.core.errors import MissingFields
from app.core.logger import LogIcon, logger
from app.models.application import (
    ApplicationDocument,
    Attachment,
    Content,
    Education,
    Internship,
    Meta,
    Personal,
)
from app.models.core import FormData
from app.models.multipart import FileRecord
from app.services.stores import Stores
from app.services.writer import BackgroundWriter

REQUIRED_FIELDS = (
    "firstName",
    "lastName",
    "email",
    "phone",
    "university",
    "major",
    "graduationDate",
    "position",
    "availability",
    "motivation",
    "terms",
)
USER_AGENT_LIMIT = 100
ID_ALPHABET = string.digits + string.ascii_lowercase
LEADING_INT = re.compile(r"\s*([+-]?\d+)")
LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
UNSAFE_FILENAME_CHARS = re.compile(r"[^\w\-.]")


@dataclass(frozen=True, slots=True)
class ClientInfo:
    """Request metadata recorded alongside a submission."""

    ip: str | None = None
    user_agent: str | None = None


def missing_fields(fields: Mapping[str, str]) -> list[str]:
    """Return required fields that are absent or blank, in declaration order.

    ``terms`` only counts as present when it is exactly ``"true"``.
    """
    missing = []
    for name in REQUIRED_FIELDS:
        value = fields.get(name)
        if name == "terms":
            if value != "true":
                missing.append(name)
        elif value is None or not value.strip():
            missing.append(name)
    return missing


def new_application_id(now_ms: int | None = None) -> str:
    """Build an id like ``APP_1718000000000_k3j9x2``."""
    now_ms = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(ID_ALPHABET) for _ in range(6))
    return f"APP_{now_ms}_{suffix}"


def parse_leading_int(value: str | None) -> int | None:
    if not value or not (match := LEADING_INT.match(value)):
        return None
    return int(match.group(1))


def parse_leading_float(value: str | None) -> float | None:
    if not value or not (match := LEADING_FLOAT.match(value)):
        return None
    number = float(match.group(1))
    return number if math.isfinite(number) else None


def sanitize_filename(filename: str) -> str:
    return UNSAFE_FILENAME_CHARS.sub("_", filename)


def build_document(application_id: str, fields: Mapping[str, str], client: ClientInfo) -> ApplicationDocument:
    """Shape validated form fields into the stored application document."""
    agent = (client.user_agent or "")[:USER_AGENT_LIMIT] or "unknown"
    return ApplicationDocument(
        id=application_id,
        personal=Personal(
            first_name=fields["firstName"],
            last_name=fields["lastName"],
            email=fields["email"],
            phone=fields["phone"],
        ),
        education=Education(
            university=fields["university"],
            major=fields["major"],
            graduation=fields["graduationDate"],
            gpa=parse_leading_float(fields.get("gpa")),
        ),
        internship=Internship(
            position=fields["position"],
            availability=fields["availability"],
            duration=parse_leading_int(fields.get("duration")),
            work_type=fields.get("workType") or "remote",
        ),
        content=Content(
            motivation=fields["motivation"],
            skills=fields.get("skills", ""),
            experience=fields.get("experience", ""),
            projects=fields.get("projects", ""),
            goals=fields.get("goals", ""),
            additional=fields.get("additionalInfo", ""),
        ),
        meta=Meta(
            submitted=datetime.now(UTC),
            terms=True,
            newsletter=fields.get("newsletter") == "true",
            ip=client.ip,
            agent=agent,
        ),
    )


class ApplicationIntake:
    """Validates and persists submissions. Built once per process."""

    def __init__(
        self,
        stores: Stores,
        writer: BackgroundWriter,
        *,
        collection: str = "applications",
        persist_in_background: bool = False,
    ) -> None:
        self.stores = stores
        self.writer = writer
        self.collection = collection
        self.persist_in_background = persist_in_background

    async def submit(self, form: FormData, client: ClientInfo) -> str:
        """Validate and persist a submission, returning its application id.

        In background mode the id is returned before anything is written.

        Raises:
            MissingFields: Required fields are absent or blank.
            StoreError: A store write failed (synchronous mode only).
        """
        fields = form.fields
        if missing := missing_fields(fields):
            logger.info("Validation failed", icon=LogIcon.VALIDATION, missing=missing)
            raise MissingFields(missing)

        document = build_document(new_application_id(), fields, client)
        files = form.files

        if self.persist_in_background:
            self.writer.submit(self.persist(document, files), name=f"persist:{document.id}")
        else:
            await self.persist(document, files)

        return document.id

    async def persist(self, document: ApplicationDocument, files: list[FileRecord]) -> ApplicationDocument:
        """Upload attachments, then write the document listing them."""
        attachments = [await self._upload(document.id, index, record) for index, record in enumerate(files)]
        stored = document.model_copy(update={"attachments": attachments})

        await self.stores.documents.put(self.collection, stored.id, stored.model_dump(mode="json", by_alias=True))
        logger.info("Application stored", icon=LogIcon.DATABASE, id=stored.id, attachments=len(attachments))
        return stored

    async def _upload(self, application_id: str, index: int, record: FileRecord) -> Attachment:
        path = f"{self.collection}/{application_id}/{index}_{sanitize_filename(record.filename)}"
        locator = await self.stores.blobs.put(path, record.body, record.content_type)
        logger.info("Attachment uploaded", icon=LogIcon.UPLOAD, path=path, size=record.size)
        return Attachment(
            field=record.name,
            filename=record.filename,
            content_type=record.content_type,
            size=record.size,
            locator=locator,
        )
