"""
Structured logging configuration using structlog.

Shared infrastructure logs through structlog; workers and domain engines use
plain ``logging`` loggers, which end up on the same stdout handler.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import EventDict, Processor

APP_NAME = "focusqueue"

# Libraries that log every frame or statement at INFO
NOISY_LOGGERS = ("aio_pika", "aiormq", "sqlalchemy.engine", "httpx", "anthropic")


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every event with the application name."""
    event_dict["app"] = APP_NAME
    return event_dict


def service_context(service_name: str) -> Processor:
    """
    Build a processor that tags events with the emitting service.

    Args:
        service_name: API service or worker name

    Returns:
        structlog processor
    """

    def add_service_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service_name


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: str | None = None,
    library_log_level: str = "WARNING",
) -> None:
    """
    Setup structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render JSON (True) or console-friendly output (False)
        service_name: Service name to include in logs
        library_log_level: Level applied to chatty third-party loggers
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )
    library_level = getattr(logging, library_log_level.upper(), logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(library_level, numeric_level))

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]
    if service_name:
        shared_processors.append(service_context(service_name))

    if json_logs:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def job_log_context(
    job_id: str | None = None,
    thought_id: str | None = None,
    user_id: str | None = None,
) -> Iterator[None]:
    """
    Bind job identifiers to every structlog event emitted inside the block.

    Unset identifiers are not bound. Bindings are task-local, so concurrent
    jobs don't see each other's ids.
    """
    bindings = {
        key: value
        for key, value in (("job_id", job_id), ("thought_id", thought_id), ("user_id", user_id))
        if value
    }
    with structlog.contextvars.bound_contextvars(**bindings):
        yield


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    return structlog.get_logger(name)
