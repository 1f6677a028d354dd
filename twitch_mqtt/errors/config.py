"""Configuration error hierarchy.

Each ``ConnectionConfigError`` subclass names one rule a connection entry can
break. ``ConfigurationError`` aggregates the failures of every entry so the
process can report all of them before refusing to start.
"""

from __future__ import annotations


class ConnectionConfigError(ValueError):
    """Base class for a single invalid connection entry."""

    message = "invalid connection"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class EmptyNickError(ConnectionConfigError):
    message = "empty nick"


class EmptyPasswordError(ConnectionConfigError):
    message = "empty pass"


class NonOAuthPasswordError(ConnectionConfigError):
    message = "pass did not start with oauth:"


class BadTopicsError(ConnectionConfigError):
    message = "pub and sub topics are the same or empty"


class InvalidQOSError(ConnectionConfigError):
    message = "invalid QOS"


class ChannelsWithoutTopicError(ConnectionConfigError):
    message = "channels provided without publish topic"


class EmptyChannelError(ConnectionConfigError):
    message = "empty channel name"


class ConfigurationError(Exception):
    """Raised when the configuration cannot be used to start the relay.

    Args:
        message: Summary of the problem.
        failures: ``(index, error)`` pairs for every invalid connection entry.
    """

    def __init__(
        self,
        message: str,
        failures: list[tuple[int, ConnectionConfigError]] | None = None,
    ) -> None:
        super().__init__(message)
        self.failures = list(failures or [])


__all__ = [
    "ConnectionConfigError",
    "EmptyNickError",
    "EmptyPasswordError",
    "NonOAuthPasswordError",
    "BadTopicsError",
    "InvalidQOSError",
    "ChannelsWithoutTopicError",
    "EmptyChannelError",
    "ConfigurationError",
]
