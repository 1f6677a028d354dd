"""IRC subsystem package.

Line codec, command builders and the TLS chat session used by the relay.
"""

from .commands import normalize_channel, privmsg_message, pong_message  # noqa: F401
from .parser import IRCMessage, Prefix, parse_irc_message  # noqa: F401
from .session import ChatSession, establish_session  # noqa: F401

__all__ = [
    "ChatSession",
    "IRCMessage",
    "Prefix",
    "establish_session",
    "normalize_channel",
    "parse_irc_message",
    "pong_message",
    "privmsg_message",
]
