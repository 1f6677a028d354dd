"""MQTT broker access shared by every relay connection."""

from __future__ import annotations

import asyncio
import logging
import secrets
import ssl
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import AsyncExitStack, asynccontextmanager, suppress
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote, urlsplit

import aiomqtt

from ..constants import (
    BROKER_CONNECT_ATTEMPTS,
    MQTT_DEFAULT_PORT,
    MQTT_DEFAULT_TLS_PORT,
    MQTT_KEEPALIVE_SECONDS,
)
from ..errors.config import ConfigurationError
from ..errors.handling import handle_retryable_error, log_error
from ..errors.internal import BrokerError
from ..logs.logger import logger

MessageHandler = Callable[[bytes], Awaitable[None]]

_PLAIN_SCHEMES = {"tcp", "mqtt"}
_TLS_SCHEMES = {"ssl", "tls", "mqtts"}


@dataclass(frozen=True, slots=True)
class BrokerAddress:
    hostname: str
    port: int
    tls: bool = False
    username: str | None = None
    password: str | None = None


def parse_broker_url(url: str) -> BrokerAddress:
    """Parse ``scheme://[user:pass@]host[:port]``; a bare host means tcp.

    Raises:
        ConfigurationError: Unknown scheme, missing host or invalid port.
    """
    if "://" not in url:
        url = f"tcp://{url}"
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme in _PLAIN_SCHEMES:
        tls = False
    elif scheme in _TLS_SCHEMES:
        tls = True
    else:
        raise ConfigurationError(f"unsupported MQTT broker scheme: {parts.scheme!r}")
    if not parts.hostname:
        raise ConfigurationError(f"MQTT broker URL has no host: {url!r}")
    try:
        port = parts.port
    except ValueError as e:
        raise ConfigurationError(f"invalid MQTT broker port in {url!r}") from e
    return BrokerAddress(
        hostname=parts.hostname,
        port=port or (MQTT_DEFAULT_TLS_PORT if tls else MQTT_DEFAULT_PORT),
        tls=tls,
        username=unquote(parts.username) if parts.username else None,
        password=unquote(parts.password) if parts.password else None,
    )


def make_client_id() -> str:
    """Time based id with a random trailing digit, unique per process start."""
    return f"{time.time_ns()}{secrets.randbelow(10)}"


def create_mqtt_client(address: BrokerAddress, client_id: str | None = None) -> aiomqtt.Client:
    return aiomqtt.Client(
        hostname=address.hostname,
        port=address.port,
        username=address.username,
        password=address.password,
        identifier=client_id or make_client_id(),
        clean_session=False,
        keepalive=MQTT_KEEPALIVE_SECONDS,
        tls_context=ssl.create_default_context() if address.tls else None,
    )


def _payload_bytes(payload: Any) -> bytes:
    if payload is None:
        return b""
    if isinstance(payload, bytes | bytearray):
        return bytes(payload)
    return str(payload).encode("utf-8")


class BrokerClient:
    """Publish/subscribe facade over one connected ``aiomqtt.Client``.

    Handlers are registered per topic filter. A single dispatcher task reads
    the client's message stream and awaits matching handlers in arrival
    order; a failing handler is logged and does not stop delivery.
    """

    def __init__(
        self,
        client: aiomqtt.Client,
        on_connection_lost: Callable[[BaseException], None] | None = None,
    ) -> None:
        self._client = client
        self._handlers: dict[str, list[MessageHandler]] = {}
        self._dispatch_task: asyncio.Task[None] | None = None
        self._on_connection_lost = on_connection_lost

    async def publish(self, topic: str, payload: str | bytes, qos: int = 0) -> None:
        """Publish ``payload`` on ``topic``.

        Raises:
            BrokerError: The client rejected or failed the publish.
        """
        try:
            await self._client.publish(topic, payload, qos=qos)
        except aiomqtt.MqttError as e:
            raise BrokerError(f"publish failed: {e}", data={"topic": topic}) from e

    async def subscribe(self, topic: str, qos: int, handler: MessageHandler) -> None:
        """Register ``handler`` for ``topic`` and subscribe at ``qos``.

        Raises:
            BrokerError: The subscription was not acknowledged.
        """
        self._handlers.setdefault(topic, []).append(handler)
        try:
            await self._client.subscribe(topic, qos=qos)
        except aiomqtt.MqttError as e:
            self.remove_handler(topic, handler)
            raise BrokerError(f"subscribe failed: {e}", data={"topic": topic}) from e
        logger.log_event("mqtt", "subscribed", topic=topic, qos=qos)

    def remove_handler(self, topic: str, handler: MessageHandler) -> None:
        """Stop routing ``topic`` to ``handler``; the broker subscription stays."""
        handlers = self._handlers.get(topic)
        if not handlers:
            return
        with suppress(ValueError):
            handlers.remove(handler)
        if not handlers:
            del self._handlers[topic]

    async def deliver(self, topic: str, payload: Any) -> int:
        """Run every handler whose filter matches ``topic``; return how many ran."""
        data = _payload_bytes(payload)
        delivered = 0
        message_topic = aiomqtt.Topic(topic)
        for topic_filter, handlers in list(self._handlers.items()):
            if not message_topic.matches(topic_filter):
                continue
            for handler in list(handlers):
                delivered += 1
                try:
                    await handler(data)
                except Exception as e:  # noqa: BLE001
                    log_error("MQTT message handler failed", e, context={"topic": topic})
        if delivered == 0:
            logger.log_event("mqtt", "unrouted_message", level=logging.DEBUG, topic=topic)
        return delivered

    async def _dispatch(self) -> None:
        try:
            async for message in self._client.messages:
                await self.deliver(str(message.topic), message.payload)
        except aiomqtt.MqttError as e:
            log_error("MQTT connection lost", e)
            if self._on_connection_lost is not None:
                self._on_connection_lost(e)

    def start(self) -> None:
        if self._dispatch_task is None or self._dispatch_task.done():
            self._dispatch_task = asyncio.create_task(self._dispatch(), name="mqtt-dispatch")

    async def stop(self) -> None:
        task, self._dispatch_task = self._dispatch_task, None
        if task is None:
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task


ClientFactory = Callable[[BrokerAddress], aiomqtt.Client]


@asynccontextmanager
async def connect_broker(
    url: str,
    *,
    client_factory: ClientFactory = create_mqtt_client,
    attempts: int = BROKER_CONNECT_ATTEMPTS,
    on_connection_lost: Callable[[BaseException], None] | None = None,
) -> AsyncIterator[BrokerClient]:
    """Connect to the broker (with retries) and run the dispatcher while open.

    Raises:
        ConfigurationError: The URL is not a usable broker address.
        BrokerError: Every connection attempt failed.
    """
    address = parse_broker_url(url)
    async with AsyncExitStack() as stack:

        async def _connect() -> aiomqtt.Client:
            return await stack.enter_async_context(client_factory(address))

        try:
            client = await handle_retryable_error(
                _connect,
                f"MQTT connect to {address.hostname}:{address.port}",
                max_attempts=attempts,
                retry_on=(aiomqtt.MqttError,),
            )
        except aiomqtt.MqttError as e:
            raise BrokerError(
                f"cannot connect to MQTT broker {address.hostname}:{address.port}: {e}"
            ) from e
        logger.log_event("mqtt", "connected", host=address.hostname, port=address.port)
        broker = BrokerClient(client, on_connection_lost=on_connection_lost)
        broker.start()
        try:
            yield broker
        finally:
            await broker.stop()
