"""Structured logging configuration with structlog.

Every event carries the service name, version and environment. Values under
credential or ID-card keys are masked before rendering, whatever the caller
passed.
"""

import logging
from collections.abc import MutableMapping
from typing import Any

import structlog

from edugram.config import Settings

SERVICE_NAME = "edugram-api"
REDACTED = "[redacted]"
SENSITIVE_KEYS = frozenset(
    {
        "password",
        "password_hash",
        "access_token",
        "token",
        "authorization",
        "id_card",
        "id_card_path",
        "dob",
    }
)


def redact_sensitive(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:  # noqa: ANN401
    """Mask passwords, bearer tokens and ID-card details."""
    for key in event_dict.keys() & SENSITIVE_KEYS:
        if event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def service_context(settings: Settings) -> structlog.types.Processor:
    """Processor stamping service, version and environment onto each event."""

    def add_service(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:  # noqa: ANN401
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("version", settings.app_version)
        event_dict.setdefault("environment", settings.environment)
        return event_dict

    return add_service


def setup_logging(settings: Settings) -> None:
    """Configure structlog for JSON or console output and route through stdlib logging."""
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            service_context(settings),
            redact_sensitive,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=getattr(logging, settings.log_level.upper(), logging.INFO))
    # uvicorn's access log duplicates the request_completed events
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    # arq logs every cron tick; the sweep logs its own results
    logging.getLogger("arq.worker").setLevel(logging.WARNING)
