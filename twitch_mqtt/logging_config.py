r"""
Logging configuration module for the Twitch MQTT relay.

Provides colored console logging through the colorlog library plus
structured error logging with in-process aggregation.
"""

import atexit
import logging
import sys
import threading
import time
from collections import defaultdict
from typing import Any

import colorlog

from .logs.logger import logger as relay_logger


class ErrorAggregator:
    """Aggregates error occurrences by category.

    Keeps the most recent occurrences per category so a summary can be
    written when the process exits.
    """

    def __init__(self, max_per_type: int = 1000) -> None:
        self.errors: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.lock = threading.Lock()
        self.max_per_type = max_per_type

    def record_error(
        self, error_type: str, message: str, context: dict[str, Any] | None = None
    ) -> None:
        with self.lock:
            bucket = self.errors[error_type]
            bucket.append(
                {"timestamp": time.time(), "message": message, "context": context or {}}
            )
            if len(bucket) > self.max_per_type:
                del bucket[: len(bucket) - self.max_per_type]

    def get_error_summary(self) -> dict[str, dict[str, Any]]:
        with self.lock:
            return {
                error_type: {
                    "total_count": len(occurrences),
                    "last_occurrence": occurrences[-1] if occurrences else None,
                }
                for error_type, occurrences in self.errors.items()
            }

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            logging.info("No errors recorded in current session")
            return
        logging.warning("🚨 ERROR SUMMARY REPORT")
        for error_type, stats in summary.items():
            logging.warning(f"  {error_type}: {stats['total_count']} total")
            if stats["last_occurrence"]:
                logging.warning(f"    Last: {stats['last_occurrence']['message']}")

    def clear(self) -> None:
        with self.lock:
            self.errors.clear()


# Global error aggregator instance
error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: BaseException | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with structured context and record it in the aggregator.

    Args:
        error_type: Category of the error (e.g., 'network', 'parsing', 'config')
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    structured_message = f"[{error_type.upper()}] {message}"
    if exception:
        structured_message += f" | Exception: {type(exception).__name__}: {exception}"
    if context:
        context_str = " | ".join(f"{k}={v}" for k, v in context.items())
        structured_message += f" | Context: {context_str}"
    logging.log(level, structured_message)
    error_aggregator.record_error(error_type, message, context)


class LoggerConfigurator:
    """Configures the root logger with colorlog output on stderr."""

    def __init__(self, debug: bool = False) -> None:
        self.debug = debug

    def build_formatter(self) -> colorlog.ColoredFormatter:
        return colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "magenta",
            },
            secondary_log_colors={
                "message": {
                    "ERROR": "red",
                    "CRITICAL": "magenta",
                }
            },
            reset=True,
        )

    def configure(self, register_summary: bool = True) -> None:
        """Install the colored handler and set levels from the debug flag."""
        log_level = logging.DEBUG if self.debug else logging.INFO

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(self.build_formatter())

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(handler)
        root_logger.setLevel(log_level)

        # paho/aiomqtt debug output is not useful even in debug mode
        logging.getLogger("aiomqtt").setLevel(logging.INFO)
        logging.getLogger("paho").setLevel(logging.INFO)

        relay_logger.set_debug(self.debug)

        if register_summary:
            atexit.register(self._log_final_error_summary)

    @staticmethod
    def _log_final_error_summary() -> None:
        logging.info("📊 Final error summary before shutdown:")
        error_aggregator.log_summary_report()
