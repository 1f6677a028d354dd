"""
Configuration constants for the Twitch MQTT relay

This module contains all tunable constants used throughout the application.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Same contract as ``_get_env_int`` for floating point values.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Twitch chat endpoint
TWITCH_IRC_HOST = os.getenv("TWITCH_IRC_HOST", "irc.chat.twitch.tv")
TWITCH_IRC_PORT = _get_env_int("TWITCH_IRC_PORT", 6697)  # TLS port
IRC_CONNECT_TIMEOUT = _get_env_float(
    "IRC_CONNECT_TIMEOUT", 15.0
)  # Seconds allowed for the TLS dial
IRC_MAX_LINE_BYTES = _get_env_int(
    "IRC_MAX_LINE_BYTES", 64 * 1024
)  # Stream reader limit; Twitch tagged lines can exceed the classic 512 bytes

# Capabilities requested right after login
TWITCH_CAPABILITIES = ("twitch.tv/tags", "twitch.tv/commands")

# Password prefix Twitch requires for chat logins
OAUTH_PREFIX = "oauth:"

# Highest MQTT delivery quality level
MAX_QOS = 2

# High-volume commands not echoed to the log unless debug is enabled
QUIET_COMMANDS = frozenset(
    {"PRIVMSG", "NOTICE", "USERNOTICE", "PING", "CLEARCHAT", "HOSTTARGET"}
)

# Process restart on server RECONNECT
RESTART_DELAY_SECONDS = _get_env_float(
    "RESTART_DELAY_SECONDS", 1.0
)  # Pause before re-executing the process

# MQTT broker
MQTT_DEFAULT_PORT = 1883
MQTT_DEFAULT_TLS_PORT = 8883
MQTT_KEEPALIVE_SECONDS = _get_env_int("MQTT_KEEPALIVE_SECONDS", 60)
BROKER_CONNECT_ATTEMPTS = _get_env_int(
    "BROKER_CONNECT_ATTEMPTS", 3
)  # Attempts for the initial broker connection
BROKER_CONNECT_MAX_BACKOFF_SECONDS = _get_env_int(
    "BROKER_CONNECT_MAX_BACKOFF_SECONDS", 10
)  # Cap for exponential wait between broker connection attempts

# Defaults for settings
DEFAULT_CONFIG_PATH = "config.yaml"
