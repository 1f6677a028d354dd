"""Per-connection relay loop between one chat session and the broker."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import suppress
from typing import TYPE_CHECKING

from ..errors.handling import log_error
from ..errors.internal import BrokerError, FatalStreamError, InternalError
from ..irc.commands import pong_message
from ..irc.parser import IRCMessage
from ..irc.session import ChatSession, establish_session
from ..logs.logger import logger
from .message_handler import (
    chat_event_payload,
    envelope_to_privmsg,
    log_inbound,
    log_outbound,
)
from .models import RelayState

if TYPE_CHECKING:  # pragma: no cover
    from ..broker.client import BrokerClient
    from ..config.model import ConnectionConfig
    from ..manager.supervisor import ProcessSupervisor

SessionFactory = Callable[["ConnectionConfig"], Awaitable[ChatSession]]


class RelayLoop:  # pylint: disable=too-many-instance-attributes
    """Relays one configured connection in both directions.

    Three coroutines share the chat session while the loop runs: the read
    loop (``run``), the broker handler (``handle_broker_message``, called from
    the broker dispatcher) and the quit waiter started by ``run``. Every write
    after login goes through ``_write_lock`` so lines never interleave.

    Attributes:
        config: Validated connection settings.
        state: Current ``RelayState``.
        closed: Set once the loop reaches ``RelayState.CLOSED``.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        broker: BrokerClient,
        stop_event: asyncio.Event,
        supervisor: ProcessSupervisor,
        *,
        debug: bool = False,
        session_factory: SessionFactory = establish_session,
    ) -> None:
        self.config = config
        self.broker = broker
        self.stop_event = stop_event
        self.supervisor = supervisor
        self.debug = debug
        self._session_factory = session_factory
        self.session: ChatSession | None = None
        self.state = RelayState.STARTING
        self.closed = asyncio.Event()
        self._write_lock = asyncio.Lock()
        self._quitting = False

    @property
    def nick(self) -> str:
        return self.config.nick

    def _set_state(self, new_state: RelayState) -> None:
        if new_state <= self.state:
            return
        logger.log_event(
            "relay",
            "state_change",
            level=logging.DEBUG,
            user=self.nick,
            old_state=self.state.name,
            new_state=new_state.name,
        )
        self.state = new_state

    async def run(self) -> None:
        """Establish the session and relay until the stream ends."""
        try:
            await self._run()
        finally:
            self._set_state(RelayState.CLOSED)
            self.closed.set()
            logger.log_event("relay", "closed", level=logging.DEBUG, user=self.nick)

    async def _run(self) -> None:
        try:
            session = await self._session_factory(self.config)
        except (InternalError, OSError) as e:
            log_error("Chat session setup failed", e, context={"nick": self.nick})
            return
        self.session = session
        self._set_state(RelayState.RUNNING)

        quit_waiter = asyncio.create_task(self._quit_on_stop(session), name=f"quit-{self.nick}")
        subscribe_topic = self.config.subscribe.topic
        subscribed = False
        try:
            if subscribe_topic:
                subscribed = await self._subscribe()
                if not subscribed:
                    return
            if self.config.publish.topic:
                logger.log_event(
                    "relay",
                    "publishing",
                    user=self.nick,
                    topic=self.config.publish.topic,
                    qos=self.config.publish.qos,
                )
            await self._read_loop(session)
        finally:
            self._set_state(RelayState.DRAINING)
            if subscribed:
                self.broker.remove_handler(subscribe_topic, self.handle_broker_message)
            await self._finish_quit_waiter(quit_waiter)
            await session.close()

    async def _subscribe(self) -> bool:
        topic = self.config.subscribe.topic
        qos = self.config.subscribe.qos
        logger.log_event("relay", "subscribing", user=self.nick, topic=topic, qos=qos)
        try:
            await self.broker.subscribe(topic, qos, self.handle_broker_message)
        except BrokerError as e:
            self.supervisor.terminate(e)
            return False
        return True

    async def _read_loop(self, session: ChatSession) -> None:
        while not self.supervisor.stopping:
            try:
                message = await session.decode()
            except EOFError:
                logger.log_event("relay", "stream_ended", level=logging.DEBUG, user=self.nick)
                return
            except (InternalError, OSError) as e:
                if self._quitting:
                    return
                fatal = FatalStreamError(f"chat read failed: {e}", data={"nick": self.nick})
                fatal.__cause__ = e
                self.supervisor.terminate(fatal)
                return
            if self.supervisor.stopping:
                return
            await self._handle_chat_message(message)

    async def _handle_chat_message(self, message: IRCMessage) -> None:
        log_inbound(message, self.nick, self.debug)

        if message.command == "PING":
            try:
                await self._send(pong_message(message))
            except InternalError as e:
                log_error("PONG failed", e, context={"nick": self.nick})
            return

        await self._publish(message)

        if message.command == "RECONNECT":
            logger.log_event("relay", "reconnect_directive", level=logging.WARNING, user=self.nick)
            await self.supervisor.restart(f"RECONNECT received by {self.nick}")

    async def _publish(self, message: IRCMessage) -> None:
        topic = self.config.publish.topic
        if not topic:
            return
        try:
            payload = chat_event_payload(message)
        except (TypeError, ValueError) as e:
            log_error("Chat event serialization failed", e, context={"nick": self.nick})
            return
        try:
            await self.broker.publish(topic, payload, self.config.publish.qos)
        except BrokerError as e:
            log_error("Publish failed", e, context={"nick": self.nick})

    async def handle_broker_message(self, payload: bytes) -> None:
        """Write a subscribe-topic delivery to chat as a ``PRIVMSG``."""
        if self.supervisor.stopping:
            return
        message = envelope_to_privmsg(payload, self.nick)
        if message is None:
            return
        try:
            await self._send(message)
        except InternalError as e:
            log_error("Relaying broker message to chat failed", e, context={"nick": self.nick})
            return
        if self.debug:
            log_outbound(message, self.nick)

    async def _send(self, message: IRCMessage) -> None:
        if self.session is None:
            raise InternalError("no chat session", data={"nick": self.nick})
        async with self._write_lock:
            await self.session.encode(message)

    async def _quit_on_stop(self, session: ChatSession) -> None:
        await self.stop_event.wait()
        self._quitting = True
        self._set_state(RelayState.DRAINING)
        logger.log_event("relay", "quitting", user=self.nick)
        try:
            async with self._write_lock:
                await session.quit()
        except InternalError as e:
            log_error("QUIT failed", e, context={"nick": self.nick}, level=logging.WARNING)
        finally:
            await session.close()

    async def _finish_quit_waiter(self, quit_waiter: asyncio.Task[None]) -> None:
        # A requested shutdown must finish its QUIT attempt before the loop closes.
        if self.stop_event.is_set():
            await quit_waiter
            return
        quit_waiter.cancel()
        with suppress(asyncio.CancelledError):
            await quit_waiter
