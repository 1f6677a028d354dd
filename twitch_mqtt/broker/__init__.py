"""MQTT broker access."""

from .client import (  # noqa: F401
    BrokerAddress,
    BrokerClient,
    MessageHandler,
    connect_broker,
    create_mqtt_client,
    parse_broker_url,
)
from .envelope import BrokerEnvelope  # noqa: F401

__all__ = [
    "BrokerAddress",
    "BrokerClient",
    "BrokerEnvelope",
    "MessageHandler",
    "connect_broker",
    "create_mqtt_client",
    "parse_broker_url",
]
