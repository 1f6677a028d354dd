"""Fakes for the chat session and broker used across relay tests."""

import asyncio

from twitch_mqtt.config.model import ConnectionConfig
from twitch_mqtt.errors.internal import BrokerError, NetworkError
from twitch_mqtt.irc.commands import quit_message
from twitch_mqtt.irc.parser import IRCMessage, parse_irc_message


_EOF = object()


class FakeSession:
    """In-memory stand-in for ChatSession.

    ``encode`` writes each line in small chunks and yields between them, so
    two unguarded writers would visibly interleave on ``wire``.
    """

    def __init__(self, lines=(), *, end=False, close_error=None):
        self.incoming: asyncio.Queue = asyncio.Queue()
        self.written: list[IRCMessage] = []
        self.wire: list[str] = []
        self.closed = False
        self.close_error = close_error
        self.fail_writes = False
        self.quit_sent_before_close = False
        for line in lines:
            self.feed(line)
        if end:
            self.end()

    def feed(self, line: str) -> None:
        self.incoming.put_nowait(parse_irc_message(line))

    def feed_error(self, error: BaseException) -> None:
        self.incoming.put_nowait(error)

    def end(self) -> None:
        self.incoming.put_nowait(_EOF)

    async def decode(self) -> IRCMessage:
        item = await self.incoming.get()
        if item is _EOF:
            self.incoming.put_nowait(_EOF)
            raise EOFError("closed")
        if isinstance(item, BaseException):
            raise item
        return item

    async def encode(self, message: IRCMessage) -> None:
        if self.closed:
            raise NetworkError("session closed")
        if self.fail_writes:
            raise NetworkError("write failed")
        line = message.encode()
        for i in range(0, len(line), 3):
            self.wire.append(line[i : i + 3])
            await asyncio.sleep(0)
        self.wire.append("\r\n")
        self.written.append(message)

    async def quit(self) -> None:
        await self.encode(quit_message())

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.quit_sent_before_close = any(m.command == "QUIT" for m in self.written)
        if self.close_error is not None:
            self.incoming.put_nowait(self.close_error)
        else:
            self.incoming.put_nowait(_EOF)

    def wire_lines(self) -> list[str]:
        return "".join(self.wire).split("\r\n")[:-1]

    def commands(self) -> list[str]:
        return [m.command for m in self.written]


class FakeBroker:
    """Records publications and routes deliveries to registered handlers."""

    def __init__(self):
        self.published: list[tuple[str, str | bytes, int]] = []
        self.subscriptions: list[tuple[str, int]] = []
        self.handlers: dict[str, list] = {}
        self.publish_attempts = 0
        self.fail_publish = False
        self.fail_subscribe = False

    async def publish(self, topic, payload, qos=0):
        self.publish_attempts += 1
        if self.fail_publish:
            raise BrokerError("publish failed")
        self.published.append((topic, payload, qos))

    async def subscribe(self, topic, qos, handler):
        if self.fail_subscribe:
            raise BrokerError("subscribe failed")
        self.subscriptions.append((topic, qos))
        self.handlers.setdefault(topic, []).append(handler)

    def remove_handler(self, topic, handler):
        handlers = self.handlers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    async def deliver(self, topic, payload):
        for handler in list(self.handlers.get(topic, [])):
            await handler(payload)


def make_connection(**overrides) -> ConnectionConfig:
    data = {
        "nick": "relaybot",
        "pass": "oauth:abcdef",
        "publish": {"topic": "twitch/in", "qos": 1, "channels": ["foo"]},
        "subscribe": {"topic": "twitch/out", "qos": 0},
    }
    data.update(overrides)
    return ConnectionConfig.model_validate(data)


def session_factory_for(*sessions):
    """Session factory handing out ``sessions`` in order."""
    pending = list(sessions)

    async def factory(_config):
        return pending.pop(0)

    return factory


async def wait_for(predicate, attempts: int = 1000) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")

