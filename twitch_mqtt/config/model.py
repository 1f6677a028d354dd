from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PublishConfig(BaseModel):
    """Outbound side of a connection: chat events go to ``topic``.

    Attributes:
        topic: MQTT topic chat events are published on; empty disables publishing.
        qos: MQTT delivery quality for publications.
        channels: Channels to join; names may omit the leading '#'.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    topic: str = ""
    qos: int = Field(default=0, ge=0)
    channels: tuple[str, ...] = ()

    @field_validator("topic", mode="before")
    @classmethod
    def _none_topic(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("channels", mode="before")
    @classmethod
    def _channels_as_tuple(cls, v: Any) -> Any:
        """Accept a YAML list (or null) and keep entries as written.

        Empty names are kept so the validator can report them.
        """
        if v is None:
            return ()
        if isinstance(v, str):
            raise ValueError("channels must be a list")
        return tuple("" if c is None else c for c in v)


class SubscribeConfig(BaseModel):
    """Inbound side of a connection: deliveries on ``topic`` become chat messages."""

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    topic: str = ""
    qos: int = Field(default=0, ge=0)

    @field_validator("topic", mode="before")
    @classmethod
    def _none_topic(cls, v: Any) -> Any:
        return "" if v is None else v


class ConnectionConfig(BaseModel):
    """One chat login relayed to and from the broker.

    Attributes:
        nick: Twitch login name.
        password: Chat password, ``oauth:`` followed by the token (YAML key ``pass``).
        publish: Outbound publish settings.
        subscribe: Inbound subscribe settings.
    """

    model_config = ConfigDict(
        frozen=True, extra="ignore", populate_by_name=True, coerce_numbers_to_str=True
    )

    nick: str = ""
    password: str = Field(default="", alias="pass", repr=False)
    publish: PublishConfig = Field(default_factory=PublishConfig)
    subscribe: SubscribeConfig = Field(default_factory=SubscribeConfig)

    @field_validator("nick", "password", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("publish", "subscribe", mode="before")
    @classmethod
    def _none_section(cls, v: Any) -> Any:
        return {} if v is None else v


class RelayConfig(BaseModel):
    """Top level of the configuration file."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    connections: tuple[ConnectionConfig, ...] = ()

    @field_validator("connections", mode="before")
    @classmethod
    def _none_connections(cls, v: Any) -> Any:
        return () if v is None else v
