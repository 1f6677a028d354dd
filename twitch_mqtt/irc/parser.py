"""IRC line parsing and encoding."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ..errors.internal import EncodingError, ParsingError

_TAG_UNESCAPES = {":": ";", "s": " ", "\\": "\\", "r": "\r", "n": "\n"}
_TAG_ESCAPES = {";": "\\:", " ": "\\s", "\\": "\\\\", "\r": "\\r", "\n": "\\n"}
_FORBIDDEN = ("\r", "\n", "\0")


@dataclass(slots=True)
class Prefix:
    """Message origin, ``name!user@host``."""

    name: str = ""
    user: str = ""
    host: str = ""

    def __str__(self) -> str:
        out = self.name
        if self.user:
            out += f"!{self.user}"
        if self.host:
            out += f"@{self.host}"
        return out


@dataclass
class IRCMessage:
    """One protocol line.

    ``params`` holds the middle parameters; the free-text argument after
    `` :`` lives in ``trailing``. ``raw`` is the line as received (empty for
    messages built locally).
    """

    command: str
    params: list[str] = field(default_factory=list)
    trailing: str = ""
    raw: str = ""
    prefix: Prefix | None = None
    tags: dict[str, str] = field(default_factory=dict)

    def encode(self) -> str:
        """Render the message as a wire line without the CRLF terminator.

        Raises:
            EncodingError: Empty command, or a field that would break framing.
        """
        if not self.command or " " in self.command:
            raise EncodingError("invalid command", data={"command": self.command})
        parts: list[str] = []
        if self.tags:
            parts.append("@" + ";".join(_format_tag(k, v) for k, v in self.tags.items()))
        if self.prefix is not None and self.prefix.name:
            parts.append(f":{self.prefix}")
        parts.append(self.command)
        for param in self.params:
            if not param or " " in param or param.startswith(":"):
                raise EncodingError("invalid parameter", data={"param": param})
            parts.append(param)
        if self.trailing:
            parts.append(f":{self.trailing}")
        line = " ".join(parts)
        if any(ch in line for ch in _FORBIDDEN):
            raise EncodingError(
                "line contains CR, LF or NUL", data={"command": self.command}
            )
        return line

    def to_dict(self) -> dict[str, Any]:
        """Broker payload form; keys are the capitalized field names consumers expect."""
        prefix = None
        if self.prefix is not None:
            prefix = {
                "Name": self.prefix.name,
                "User": self.prefix.user,
                "Host": self.prefix.host,
            }
        return {
            "Raw": self.raw,
            "Tags": dict(self.tags),
            "Prefix": prefix,
            "Command": self.command,
            "Params": list(self.params),
            "Trailing": self.trailing,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


def parse_irc_message(raw_line: str) -> IRCMessage:
    """Parse one received line (CRLF optional).

    Raises:
        ParsingError: Blank line, or no command after tags/prefix.
    """
    line = raw_line.rstrip("\r\n")
    rest = line
    if not rest.strip():
        raise ParsingError("empty line")

    tags: dict[str, str] = {}
    if rest.startswith("@"):
        tags_part, sep, rest = rest.partition(" ")
        if not sep:
            raise ParsingError("tags without command", data={"raw": line})
        tags = _parse_tags(tags_part[1:])
        rest = rest.lstrip(" ")

    prefix: Prefix | None = None
    if rest.startswith(":"):
        prefix_part, sep, rest = rest.partition(" ")
        if not sep:
            raise ParsingError("prefix without command", data={"raw": line})
        prefix = _parse_prefix(prefix_part[1:])
        rest = rest.lstrip(" ")

    head, _, trailing = rest.partition(" :")
    parts = head.split()
    if not parts or parts[0].startswith(":"):
        raise ParsingError("missing command", data={"raw": line})

    return IRCMessage(
        command=parts[0],
        params=parts[1:],
        trailing=trailing,
        raw=line,
        prefix=prefix,
        tags=tags,
    )


def _parse_prefix(raw_prefix: str) -> Prefix:
    name, _, host = raw_prefix.partition("@")
    name, _, user = name.partition("!")
    return Prefix(name=name, user=user, host=host)


def _parse_tags(raw_tags: str) -> dict[str, str]:
    tags: dict[str, str] = {}
    for tag in raw_tags.split(";"):
        if not tag:
            continue
        k, _, v = tag.partition("=")
        tags[k] = _unescape_tag_value(v)
    return tags


def _unescape_tag_value(value: str) -> str:
    if "\\" not in value:
        return value
    out: list[str] = []
    chars = iter(value)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, "")
        out.append(_TAG_UNESCAPES.get(nxt, nxt))
    return "".join(out)


def _format_tag(key: str, value: str) -> str:
    if not value:
        return key
    return f"{key}=" + "".join(_TAG_ESCAPES.get(ch, ch) for ch in value)
