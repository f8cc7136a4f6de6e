"""
jwt_bearer_flow.observability.logging

Structured logging configuration for the CLI and the mock identity provider.

Responsibilities:
- Configure `structlog` for JSON logs on stderr (stdout is reserved for flow output).
- Provide a small wrapper for obtaining bound loggers.
- Provide a redaction helper for bearer credentials.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(*, service_name: str, level: str) -> None:
    """
    Structured JSON logs, one event per line.
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service_name(service_name),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _add_service_name(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def redact(secret: str, *, keep: int = 8) -> str:
    # Tokens and assertions only ever reach the logs in truncated form.
    if len(secret) <= keep:
        return "***"
    return f"{secret[:keep]}...({len(secret)} chars)"


# --- Module Notes -----------------------------------------------------------
# Stage names are bound via contextvars in `orchestrator.pipeline`.
