"""Centralized internal error hierarchy.

These exceptions give semantic categories to failures at the chat and broker
boundaries. Raw socket, SSL and MQTT errors are wrapped into them before they
reach the relay loop.

Classes:
  InternalError        – Base for all internal errors.
  NetworkError         – Chat transport failures (dial, write, read).
  ParsingError         – A chat line that cannot be decoded.
  EncodingError        – A chat message that cannot be put on the wire.
  BrokerError          – MQTT connect/publish/subscribe failures.
  FatalStreamError     – A read failure that must terminate the process.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for chat transport errors.

    Covers TLS dial failures, timeouts and write failures on an established
    session.
    """


class ParsingError(InternalError):
    """Exception raised when an inbound chat line cannot be decoded."""


class EncodingError(InternalError):
    """Exception raised when a chat message cannot be encoded.

    Typically a missing command or a CR/LF inside a field, which would let one
    message smuggle a second protocol line onto the wire.
    """


class BrokerError(InternalError):
    """Exception raised for MQTT broker failures (connect, publish, subscribe)."""


class FatalStreamError(InternalError):
    """A chat read failure other than a clean end of stream.

    The relay treats these as unrecoverable transport faults and terminates
    the whole process instead of the single connection.
    """


__all__ = [
    "InternalError",
    "NetworkError",
    "ParsingError",
    "EncodingError",
    "BrokerError",
    "FatalStreamError",
]
