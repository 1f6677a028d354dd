from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import BROKER_CONNECT_MAX_BACKOFF_SECONDS
from ..logging_config import log_structured_error
from .config import ConfigurationError, ConnectionConfigError
from .internal import (
    BrokerError,
    EncodingError,
    FatalStreamError,
    InternalError,
    NetworkError,
    ParsingError,
)

T = TypeVar("T")


def error_category(error: BaseException) -> str:
    """Map an exception onto the category used by structured error logging."""
    if isinstance(error, FatalStreamError):
        return "stream"
    if isinstance(error, NetworkError | OSError | ConnectionError | TimeoutError):
        return "network"
    if isinstance(error, BrokerError):
        return "broker"
    if isinstance(error, ConnectionConfigError | ConfigurationError):
        return "config"
    if isinstance(error, ParsingError | EncodingError | ValueError):
        return "parsing"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(
    message: str,
    error: BaseException,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Logs an error message with the associated exception details.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
        level: Logging level for the record.
    """
    merged: dict[str, Any] = {}
    if isinstance(error, InternalError) and error.data:
        merged.update(error.data)
    if context:
        merged.update(context)
    log_structured_error(
        error_type=error_category(error),
        message=f"{message}: {error}",
        exception=error,
        context=merged or None,
        level=level,
    )


async def handle_retryable_error(
    operation: Callable[[], Awaitable[T]],
    context: str,
    max_attempts: int = 3,
    retry_on: tuple[type[BaseException], ...] = (BrokerError, OSError),
    max_backoff: float | None = None,
) -> T:
    """Run ``operation`` with Tenacity retries on transient failures.

    Each failed attempt is logged; once ``max_attempts`` is exhausted the last
    exception is re-raised unchanged so the caller can decide how fatal it is.

    Args:
        operation: Zero-argument coroutine factory.
        context: Descriptive context for log lines.
        max_attempts: Maximum number of attempts (at least one).
        retry_on: Exception types that trigger another attempt.
        max_backoff: Cap for the exponential wait; defaults to
            ``BROKER_CONNECT_MAX_BACKOFF_SECONDS``.

    Returns:
        Whatever ``operation`` returns on its first successful attempt.
    """

    def after_attempt(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        if outcome is not None and outcome.failed:
            log_error(
                f"Attempt {retry_state.attempt_number}/{max_attempts} failed for {context}",
                outcome.exception(),
                level=logging.WARNING,
            )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(
            multiplier=1,
            max=BROKER_CONNECT_MAX_BACKOFF_SECONDS if max_backoff is None else max_backoff,
        ),
        retry=retry_if_exception_type(retry_on),
        after=after_attempt,
        reraise=True,
    )
    return await retrying(operation)
