"""Process settings from the command line and environment."""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from ..constants import DEFAULT_CONFIG_PATH
from ..errors.config import ConfigurationError

_TRUTHY = ("true", "1", "yes", "on")


@dataclass(frozen=True, slots=True)
class Settings:
    mqtt_broker: str
    config_path: str = DEFAULT_CONFIG_PATH
    debug: bool = False
    check_config: bool = False


def _env_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def build_parser(env: Mapping[str, str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twitch-mqtt",
        description="Relay Twitch chat to and from an MQTT broker.",
    )
    parser.add_argument(
        "--mqtt-broker",
        default=env.get("MQTT_BROKER"),
        help="broker URL, e.g. tcp://localhost:1883 [env: MQTT_BROKER]",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        default=env.get("CONFIG") or DEFAULT_CONFIG_PATH,
        help=f"path to the YAML config file (default: {DEFAULT_CONFIG_PATH}) [env: CONFIG]",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=_env_flag(env.get("DEBUG")),
        help="enables debug logging [env: DEBUG]",
    )
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="load and validate the config file, then exit",
    )
    return parser


def load_settings(
    argv: Sequence[str] | None = None,
    env: Mapping[str, str] | None = None,
    *,
    dotenv: bool = True,
) -> Settings:
    """Parse settings; ``.env`` is loaded first so its values act as defaults.

    Raises:
        ConfigurationError: No broker address was given (only
            ``--check-config`` runs without one).
        SystemExit: argparse rejected the command line.
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))
    environ = os.environ if env is None else env
    args = build_parser(environ).parse_args(argv)
    if not args.mqtt_broker and not args.check_config:
        raise ConfigurationError("MQTT broker address is required (--mqtt-broker or MQTT_BROKER)")
    return Settings(
        mqtt_broker=args.mqtt_broker or "",
        config_path=args.config_path,
        debug=bool(args.debug),
        check_config=bool(args.check_config),
    )
