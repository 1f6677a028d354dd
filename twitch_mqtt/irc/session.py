"""Chat session over one TLS stream to Twitch IRC."""

from __future__ import annotations

import asyncio
import logging
import ssl
from collections.abc import Awaitable, Callable, Iterable
from contextlib import suppress
from typing import TYPE_CHECKING

from ..constants import (
    IRC_CONNECT_TIMEOUT,
    IRC_MAX_LINE_BYTES,
    TWITCH_CAPABILITIES,
    TWITCH_IRC_HOST,
    TWITCH_IRC_PORT,
)
from ..errors.internal import InternalError, NetworkError, ParsingError
from ..logs.logger import logger
from .commands import (
    cap_req_message,
    join_message,
    nick_message,
    pass_message,
    quit_message,
)
from .parser import IRCMessage, parse_irc_message

if TYPE_CHECKING:  # pragma: no cover
    from ..config.model import ConnectionConfig


class ChatSession:
    """Owns the reader/writer pair of one authenticated chat connection.

    ``encode`` and ``decode`` move one message at a time. The session does not
    lock its own writes: once the relay is running, every write goes through
    the owning relay loop's lock.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        nick: str | None = None,
    ) -> None:
        self.reader = reader
        self.writer = writer
        self.nick = nick
        self._closed = False

    @classmethod
    async def open(
        cls,
        host: str = TWITCH_IRC_HOST,
        port: int = TWITCH_IRC_PORT,
        *,
        nick: str | None = None,
        ssl_context: ssl.SSLContext | None = None,
        timeout: float = IRC_CONNECT_TIMEOUT,
    ) -> ChatSession:
        """Dial ``host:port`` over TLS.

        Raises:
            NetworkError: The dial failed or timed out.
        """
        logger.log_event(
            "irc", "connect_start", level=logging.DEBUG, user=nick, server=host, port=port
        )
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(
                    host,
                    port,
                    ssl=ssl_context or ssl.create_default_context(),
                    limit=IRC_MAX_LINE_BYTES,
                ),
                timeout=timeout,
            )
        except TimeoutError as e:
            raise NetworkError(
                f"timed out connecting to {host}:{port}", data={"timeout": timeout}
            ) from e
        except OSError as e:
            raise NetworkError(f"cannot connect to {host}:{port}: {e}") from e
        return cls(reader, writer, nick=nick)

    @property
    def closed(self) -> bool:
        return self._closed

    async def encode(self, message: IRCMessage) -> None:
        """Write one message and wait for the transport to accept it.

        Raises:
            EncodingError: The message cannot be rendered as a single line.
            NetworkError: The session is closed or the write failed.
        """
        line = message.encode()
        if self._closed:
            raise NetworkError("session closed", data={"command": message.command})
        try:
            self.writer.write(f"{line}\r\n".encode())
            await self.writer.drain()
        except (OSError, RuntimeError) as e:
            raise NetworkError(
                f"write failed: {e}", data={"command": message.command}
            ) from e

    async def decode(self) -> IRCMessage:
        """Read the next non-blank line.

        Raises:
            EOFError: The stream ended cleanly.
            ParsingError: The line is too long or has no command.
            NetworkError: The read failed.
        """
        while True:
            try:
                data = await self.reader.readline()
            except ValueError as e:
                # StreamReader signals an over-long line this way
                raise ParsingError(f"line exceeds limit: {e}") from e
            except OSError as e:
                raise NetworkError(f"read failed: {e}") from e
            if not data:
                raise EOFError("chat stream closed")
            line = data.decode("utf-8", errors="replace").rstrip("\r\n")
            if line.strip():
                return parse_irc_message(line)

    async def login(self, nick: str, password: str) -> None:
        await self.encode(pass_message(password))
        await self.encode(nick_message(nick))

    async def request_capabilities(self, capabilities: Iterable[str]) -> None:
        message = cap_req_message(capabilities)
        if message is not None:
            await self.encode(message)

    async def join(self, channels: Iterable[str]) -> None:
        message = join_message(channels)
        if message is not None:
            await self.encode(message)

    async def quit(self) -> None:
        await self.encode(quit_message())

    async def close(self) -> None:
        """Close the stream; a pending ``decode`` then sees end of stream."""
        if self._closed:
            return
        self._closed = True
        self.writer.close()
        with suppress(OSError):
            await self.writer.wait_closed()


SessionOpener = Callable[..., Awaitable[ChatSession]]


async def establish_session(
    config: ConnectionConfig,
    *,
    host: str = TWITCH_IRC_HOST,
    port: int = TWITCH_IRC_PORT,
    capabilities: Iterable[str] = TWITCH_CAPABILITIES,
    opener: SessionOpener = ChatSession.open,
) -> ChatSession:
    """Dial, log in, request capabilities and join the configured channels.

    The session is closed again if any step after the dial fails.

    Raises:
        NetworkError: Dial or write failure.
        EncodingError: A login/join field cannot be encoded.
    """
    session = await opener(host, port, nick=config.nick)
    try:
        await session.login(config.nick, config.password)
        await session.request_capabilities(capabilities)
        await session.join(config.publish.channels)
    except InternalError:
        await session.close()
        raise
    logger.log_event(
        "irc",
        "session_ready",
        user=config.nick,
        server=host,
        channels=len(config.publish.channels),
    )
    return session
