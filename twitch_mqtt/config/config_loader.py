"""Configuration file loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors.config import ConfigurationError
from ..logs.logger import logger
from .model import ConnectionConfig, RelayConfig


class ConfigLoader:
    """Reads the YAML configuration file into immutable models."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def load(self) -> RelayConfig:
        """Load and structurally validate the configuration file.

        Raises:
            ConfigurationError: File missing/unreadable, invalid YAML, or a
                shape pydantic rejects (wrong types, negative qos).
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"cannot read config file {self.path}: {e}") from e
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"invalid YAML in {self.path}: {e}") from e
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"config file {self.path} must contain a mapping")
        try:
            config = RelayConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigurationError(f"invalid configuration in {self.path}: {e}") from e
        logger.log_event(
            "config",
            "loaded",
            level=logging.DEBUG,
            path=str(self.path),
            count=len(config.connections),
        )
        return config


def load_connections(path: str | os.PathLike[str]) -> list[ConnectionConfig]:
    """Convenience wrapper returning just the connection list."""
    return list(ConfigLoader(path).load().connections)
