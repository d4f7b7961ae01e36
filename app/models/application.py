"""Application document and API response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Personal(CamelModel):
    first_name: str
    last_name: str
    email: str
    phone: str


class Education(CamelModel):
    university: str
    major: str
    graduation: str
    gpa: float | None = None


class Internship(CamelModel):
    position: str
    availability: str
    duration: int | None = None
    work_type: str = "remote"


class Content(CamelModel):
    motivation: str
    skills: str = ""
    experience: str = ""
    projects: str = ""
    goals: str = ""
    additional: str = ""


class Meta(CamelModel):
    submitted: datetime
    terms: bool = True
    newsletter: bool = False
    ip: str | None = None
    agent: str = "unknown"


class Attachment(CamelModel):
    """Where one uploaded file ended up."""

    field: str
    filename: str
    content_type: str
    size: int
    locator: str


class ApplicationDocument(CamelModel):
    """The record persisted for one submission."""

    id: str
    personal: Personal
    education: Education
    internship: Internship
    content: Content
    meta: Meta
    attachments: list[Attachment] = []


class SubmissionResponse(CamelModel):
    success: bool = True
    application_id: str
    message: str = "Application received"
    duration: int


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    message: str | None = None
    missing: list[str] | None = None
    duration: int | None = None
