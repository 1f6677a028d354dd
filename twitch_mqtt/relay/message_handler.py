"""Translation between chat lines and broker payloads."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from ..broker.envelope import BrokerEnvelope
from ..constants import QUIET_COMMANDS
from ..irc.commands import privmsg_message
from ..irc.parser import IRCMessage
from ..logs.logger import logger


def should_log_inbound(message: IRCMessage, debug: bool) -> bool:
    """Debug echoes everything; otherwise high-volume chat traffic is skipped."""
    return debug or message.command not in QUIET_COMMANDS


def log_inbound(message: IRCMessage, nick: str, debug: bool) -> None:
    if should_log_inbound(message, debug):
        logger.log_event("irc", "inbound", human=f"> {message.raw}", user=nick)


def log_outbound(message: IRCMessage, nick: str) -> None:
    logger.log_event("irc", "outbound", human=f"< {message.encode()}", user=nick)


def chat_event_payload(message: IRCMessage) -> str:
    """JSON document published for one chat event."""
    return message.to_json()


def envelope_to_privmsg(payload: bytes | str, nick: str) -> IRCMessage | None:
    """Turn a subscribe-topic delivery into a ``PRIVMSG``.

    Returns None (after logging why) for undecodable payloads and for an
    empty channel or message.
    """
    try:
        envelope = BrokerEnvelope.from_payload(payload)
    except ValidationError as e:
        logger.log_event(
            "relay",
            "envelope_invalid",
            level=logging.WARNING,
            user=nick,
            error=str(e.errors()[0]["msg"]) if e.errors() else str(e),
        )
        return None
    if not envelope.channel:
        logger.log_event("relay", "envelope_empty_channel", level=logging.WARNING, user=nick)
        return None
    if not envelope.message:
        logger.log_event(
            "relay",
            "envelope_empty_message",
            level=logging.WARNING,
            user=nick,
            target=envelope.channel,
        )
        return None
    return privmsg_message(envelope.channel, envelope.message)
