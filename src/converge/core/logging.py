"""
Structured logging for the convergence engine.

Event names are snake_case verbs (``elastic_ip_released``,
``iam_mapping_created``). Operations bind the cluster or principal they
act for once and pass resource ids as keywords, so every release or
create can be traced back to an allocation id or mapping name.

A ``ConvergeError`` passed as ``error=`` is expanded into its ``to_dict()``
form, so a retried or failed call logs its code and context as fields
instead of a repr.

Output (JSON format)::

    {
      "@timestamp": "2025-12-26T10:00:00Z",
      "log.level": "info",
      "service.name": "converge",
      "event": "elastic_ip_released",
      "cluster": "prod-eu",
      "allocation_id": "eipalloc-1"
    }
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from converge.core.errors import ConvergeError

if TYPE_CHECKING:
    from converge.core.settings import ConvergeSettings

_ECS_RENAMES = {
    "timestamp": "@timestamp",
    "level": "log.level",
}


def _expand_converge_error(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Replace an ``error`` ConvergeError with its structured fields."""
    error = event_dict.get("error")
    if isinstance(error, ConvergeError):
        event_dict["error"] = error.to_dict()
    return event_dict


def _ecs_fields(service: str) -> Processor:
    def processor(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        for old, new in _ECS_RENAMES.items():
            if old in event_dict:
                event_dict[new] = event_dict.pop(old)
        event_dict.setdefault("service.name", service)
        return event_dict

    return processor


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "converge",
) -> None:
    """Configure structured logging for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name stamped on JSON records
    """
    numeric_level = getattr(logging, level.upper())

    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        _expand_converge_error,
    ]

    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            _ecs_fields(service),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # botocore logs through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )


def configure_from_settings(settings: ConvergeSettings, service: str = "converge") -> None:
    """Configure logging from ``log_level`` and ``log_json`` settings."""
    configure_logging(level=settings.log_level, json_format=settings.log_json, service=service)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
]
