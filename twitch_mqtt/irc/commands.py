"""Builders for the chat commands the relay sends."""

from __future__ import annotations

from collections.abc import Iterable

from .parser import IRCMessage

CHANNEL_SIGIL = "#"


def normalize_channel(name: str) -> str:
    """Return ``name`` with a leading '#'; already prefixed names are unchanged."""
    if name.startswith(CHANNEL_SIGIL):
        return name
    return CHANNEL_SIGIL + name


def pass_message(password: str) -> IRCMessage:
    return IRCMessage(command="PASS", params=[password])


def nick_message(nick: str) -> IRCMessage:
    return IRCMessage(command="NICK", params=[nick])


def cap_req_message(capabilities: Iterable[str]) -> IRCMessage | None:
    """``CAP REQ :<caps>``, or None when nothing is requested."""
    caps = [c for c in capabilities if c]
    if not caps:
        return None
    return IRCMessage(command="CAP", params=["REQ"], trailing=" ".join(caps))


def join_message(channels: Iterable[str]) -> IRCMessage | None:
    """One ``JOIN`` for every channel, comma separated, or None for no channels."""
    names = [normalize_channel(c) for c in channels]
    if not names:
        return None
    return IRCMessage(command="JOIN", params=[",".join(names)])


def privmsg_message(channel: str, text: str) -> IRCMessage:
    return IRCMessage(command="PRIVMSG", params=[normalize_channel(channel)], trailing=text)


def pong_message(ping: IRCMessage) -> IRCMessage:
    """Reply to a ``PING`` echoing its params and trailing."""
    return IRCMessage(command="PONG", params=list(ping.params), trailing=ping.trailing)


def quit_message() -> IRCMessage:
    return IRCMessage(command="QUIT")
