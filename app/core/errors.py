"""Typed failures raised while reading and persisting an application submission."""

from robyn import status_codes


class IntakeError(Exception):
    """Base class for request-fatal intake failures with an HTTP mapping."""

    code: str = "intake_error"
    status_code: int = status_codes.HTTP_400_BAD_REQUEST

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code.replace("_", " "))
        self.message = str(self.args[0])

    def to_dict(self) -> dict:
        return {"success": False, "error": self.code, "message": self.message}


class MultipartError(IntakeError):
    """A request body could not be read or decoded. Aborts the whole request."""


class NoBoundaryFound(MultipartError):
    code = "no_boundary_found"


class UnsupportedMediaType(MultipartError):
    code = "unsupported_media_type"
    status_code = status_codes.HTTP_415_UNSUPPORTED_MEDIA_TYPE


class PayloadTooLarge(MultipartError):
    code = "payload_too_large"
    status_code = status_codes.HTTP_413_REQUEST_ENTITY_TOO_LARGE


class TooManyFiles(MultipartError):
    code = "too_many_files"
    status_code = status_codes.HTTP_413_REQUEST_ENTITY_TOO_LARGE


class StreamTimeout(MultipartError):
    code = "stream_timeout"
    status_code = status_codes.HTTP_408_REQUEST_TIMEOUT


class StreamError(MultipartError):
    code = "stream_error"


class EmptyBody(MultipartError):
    code = "empty_body"


class InvalidJsonBody(MultipartError):
    code = "invalid_json_body"


class StoreError(IntakeError):
    """A document-store or blob-store call failed. Never raised by the decoder."""

    code = "store_unavailable"
    status_code = status_codes.HTTP_502_BAD_GATEWAY


class MissingFields(IntakeError):
    """Required application fields were absent or blank."""

    code = "missing_required_fields"

    def __init__(self, missing: list[str]) -> None:
        super().__init__("Missing required fields")
        self.missing = missing

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message, "missing": self.missing}
