"""Connection configuration validation."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..constants import MAX_QOS, OAUTH_PREFIX
from ..errors.config import (
    BadTopicsError,
    ChannelsWithoutTopicError,
    ConfigurationError,
    ConnectionConfigError,
    EmptyChannelError,
    EmptyNickError,
    EmptyPasswordError,
    InvalidQOSError,
    NonOAuthPasswordError,
)
from ..logs.logger import logger
from .model import ConnectionConfig


def check_connection(conn: ConnectionConfig) -> None:
    """Raise the first rule ``conn`` breaks; return None when it is usable.

    Pure function: no I/O, no logging.
    """
    if not conn.nick:
        raise EmptyNickError()
    if not conn.password:
        raise EmptyPasswordError()
    if not conn.password.startswith(OAUTH_PREFIX):
        raise NonOAuthPasswordError()
    if conn.publish.topic == conn.subscribe.topic:
        raise BadTopicsError()
    if conn.publish.channels and not conn.publish.topic:
        raise ChannelsWithoutTopicError()
    if conn.publish.qos > MAX_QOS or conn.subscribe.qos > MAX_QOS:
        raise InvalidQOSError()
    if any(not channel for channel in conn.publish.channels):
        raise EmptyChannelError()


class ConfigValidator:
    """Validates every configured connection and aggregates the failures."""

    @staticmethod
    def collect_errors(
        connections: Iterable[ConnectionConfig],
    ) -> list[tuple[int, ConnectionConfigError]]:
        failures: list[tuple[int, ConnectionConfigError]] = []
        for index, conn in enumerate(connections):
            try:
                check_connection(conn)
            except ConnectionConfigError as e:
                failures.append((index, e))
        return failures

    @classmethod
    def validate_all(cls, connections: Iterable[ConnectionConfig]) -> None:
        """Log every invalid entry and raise if there is at least one.

        Raises:
            ConfigurationError: One or more connections are invalid.
        """
        failures = cls.collect_errors(connections)
        for index, error in failures:
            logger.log_event(
                "config", "connection_invalid", level=logging.ERROR, index=index, error=str(error)
            )
        if failures:
            raise ConfigurationError(
                f"{len(failures)} invalid connection(s) in configuration", failures
            )
