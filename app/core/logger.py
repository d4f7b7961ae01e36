import logging
from dataclasses import dataclass, field
from enum import StrEnum

import orjson
import structlog
from asgi_correlation_id import correlation_id
from beartype import beartype

from app.core.settings import settings

MAX_EVENT_LENGTH = 80
MAX_VALUE_LENGTH = 200


class LoggerError(Exception):
    """Exception for logger related issues."""


class LogLevel(StrEnum):
    """LogLevel types for logger configuration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogIcon(StrEnum):
    """Icon mappings for the intake pipeline log categories."""

    DEFAULT = "📋"

    # Outcomes
    SUCCESS = "✅"
    ERROR = "❌"
    WARNING = "⚠️"

    # Lifecycle
    START = "🚀"
    PROCESSING = "🔄"
    COMPLETE = "✨"
    TOOL = "🔧"
    ADAPTER = "🔌"
    HEALTHCHECK = "❤️"

    # Request body
    STREAMING = "📡"
    TIMEOUT = "⏱️"
    FILE = "📄"
    JSON = "📝"
    VALIDATION = "✓"
    FORBIDDEN = "🚫"

    # Persistence
    DATABASE = "💾"
    UPLOAD = "📤"
    LATENCY = "⚡"


@dataclass
class LoggerConfig:
    """Logger configuration driven by settings."""
    debug: bool = field(default_factory=lambda: settings.DEBUG)
    app_name: str = field(default_factory=lambda: settings.API_NAME)
    log_level: LogLevel = field(default_factory=lambda: LogLevel(settings.LOG_LEVEL))


def add_correlation_id(logger, method_name: str, event_dict: dict) -> dict:
    """Add the request correlation_id set by the router, if any."""
    if request_id := correlation_id.get():
        event_dict["correlation_id"] = request_id
    return event_dict


def summarize_payloads(logger, method_name: str, event_dict: dict) -> dict:
    """Replace raw request bytes and oversized strings in kwargs with a short summary.

    Multipart bodies and attachments must never be written to the log verbatim.
    """
    for key, value in event_dict.items():
        match value:
            case bytes() | bytearray() | memoryview():
                event_dict[key] = f"<{len(value)} bytes>"
            case str() if key != "event" and len(value) > MAX_VALUE_LENGTH:
                event_dict[key] = f"{value[:MAX_VALUE_LENGTH]}... ({len(value)} chars)"
    return event_dict


class EventFormatter:
    """
    Normalize the event message of every log line.

    - Event messages are upper-cased and cut at MAX_EVENT_LENGTH characters.
    - The ``icon`` kwarg must be a LogIcon member; it is consumed here.
    - The icon is prepended to the message in debug mode only.
    """

    def __init__(self, debug: bool) -> None:
        self.debug = debug

    @beartype
    def __call__(self, logger, name: str, event_dict: dict) -> dict:
        try:
            icon = LogIcon(event_dict.pop("icon", LogIcon.DEFAULT))
        except ValueError as err:
            raise LoggerError("Wrong Icon chosen, please choose a valid LogIcon enum member") from err

        event = str(event_dict.get("event", ""))[:MAX_EVENT_LENGTH].upper()
        event_dict["event"] = f"{icon.value} {event}" if self.debug else event
        return event_dict


def dev_pipeline_renderer(logger, name: str, event_dict: dict) -> str:
    """Render a log line as ``timestamp | LEVEL | EVENT | k=v | file:line``."""
    timestamp = event_dict.pop("timestamp", "")
    level = str(event_dict.pop("level", LogLevel.INFO.value)).upper()
    event = event_dict.pop("event", "")
    filename = event_dict.pop("filename", "")
    lineno = event_dict.pop("lineno", "")

    extra = " | ".join(f"{key}={value}" for key, value in event_dict.items())
    location = f"{filename}:{lineno}" if filename else ""

    return " | ".join(filter(None, [timestamp, level, event, extra, location]))


def setup_logging(config: LoggerConfig) -> None:
    """Configure structlog: pipe renderer in debug, orjson lines otherwise."""
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
            additional_ignores=["logger"]
        ),
        EventFormatter(debug=config.debug),
        summarize_payloads,
        add_correlation_id,
    ]

    if config.debug:
        processors = [*shared_processors, dev_pipeline_renderer]
        logger_factory = structlog.PrintLoggerFactory()
    else:
        processors = [
            *shared_processors,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(serializer=orjson.dumps),
        ]
        logger_factory = structlog.BytesLoggerFactory()

    structlog.configure(
        processors=processors,
        logger_factory=logger_factory,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, config.log_level.value)),
        cache_logger_on_first_use=True,
    )


_default_config = LoggerConfig()
setup_logging(_default_config)

logger = structlog.get_logger(_default_config.app_name)
