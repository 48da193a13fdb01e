"""
Retrying SQLite calls that hit a held lock

Another process writing the same ballot file makes SQLite answer "database
is locked" (or "busy"). Such calls are retried with exponential backoff; any
other OperationalError, like a missing table, is raised immediately.
"""

import sqlite3
from collections.abc import Callable
from typing import TypeVar

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from delegable_ballot.kernel.logging import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., object])


def is_lock_contention(error: BaseException) -> bool:
    if not isinstance(error, sqlite3.OperationalError):
        return False
    message = str(error).lower()
    return "locked" in message or "busy" in message


def _log_retry(state: RetryCallState) -> None:
    logger.warning(
        "SQLite lock held, retrying",
        function=getattr(state.fn, "__name__", None),
        attempt=state.attempt_number,
    )


def retry_on_lock(
    attempts: int = 3, first_wait: float = 0.1, max_wait: float = 1.0
) -> Callable[[F], F]:
    """
    Decorator retrying lock contention, re-raising once attempts run out

    Args:
        attempts: Total calls including the first
        first_wait: Seconds before the first retry; doubles per retry
        max_wait: Upper bound on a single wait, in seconds
    """
    return retry(
        retry=retry_if_exception(is_lock_contention),
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(min=first_wait, max=max_wait),
        before_sleep=_log_retry,
        reraise=True,
    )
