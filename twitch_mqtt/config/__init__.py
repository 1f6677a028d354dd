"""Configuration package exports."""

from .config_loader import ConfigLoader, load_connections
from .config_validator import ConfigValidator, check_connection
from .model import ConnectionConfig, PublishConfig, RelayConfig, SubscribeConfig
from .settings import Settings, load_settings

__all__ = [
    "ConfigLoader",
    "ConfigValidator",
    "ConnectionConfig",
    "PublishConfig",
    "RelayConfig",
    "Settings",
    "SubscribeConfig",
    "check_connection",
    "load_connections",
    "load_settings",
]
