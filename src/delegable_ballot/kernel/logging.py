"""
Structured logging for the ballot

structlog over the stdlib logging module, rendered to stderr so CLI output
on stdout stays clean. Records carry the correlation id bound for the
current context, and voter identities are masked before rendering: the event
log, not the operational log, is where identities are recorded.
"""

import logging
import os
import secrets
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

IDENTITY_FIELDS = frozenset(
    {"actor_id", "voter_id", "target_id", "delegate_id", "chairperson"}
)
MASK = "***"


def is_production() -> bool:
    """True when ENVIRONMENT=production"""
    return os.getenv("ENVIRONMENT", "development").lower() == "production"


def bind_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation id to the current context (a fresh one if None)"""
    correlation_id = correlation_id or secrets.token_hex(8)
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
    return correlation_id


def current_correlation_id() -> str | None:
    return structlog.contextvars.get_contextvars().get("correlation_id")


def mask_identities(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor replacing identity fields with a mask"""
    for key in IDENTITY_FIELDS.intersection(event_dict):
        event_dict[key] = MASK
    return event_dict


def configure_logging(*, json_output: bool = False, log_level: str = "INFO") -> None:
    """
    Configure structlog and the stdlib root logger

    Args:
        json_output: One JSON object per line (production) instead of
            human-readable console lines
        log_level: Name of the minimum level, e.g. "DEBUG" or "WARNING"
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level.upper(),
        force=True,
    )

    if json_output:
        renderers: list[Any] = [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            mask_identities,
            *renderers,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def log_operation(
    logger: structlog.stdlib.BoundLogger, operation: str, **context: Any
) -> Iterator[None]:
    """
    Log the start and the outcome of a block, with its duration

    A failure is logged with its exception type and re-raised.
    """
    log = logger.bind(operation=operation, **context)
    log.debug(f"{operation} started")
    started = time.perf_counter()
    try:
        yield
    except Exception as e:
        log.warning(
            f"{operation} failed",
            error_type=type(e).__name__,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        raise
    log.info(
        f"{operation} completed",
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
