"""Application wiring: settings, config, broker, relay loops and exit codes."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Callable, Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any

from .broker.client import BrokerClient, connect_broker
from .config.config_loader import load_connections
from .config.config_validator import ConfigValidator
from .config.model import ConnectionConfig
from .config.settings import Settings, load_settings
from .errors.config import ConfigurationError
from .errors.handling import log_error
from .errors.internal import BrokerError
from .irc.session import establish_session
from .logging_config import LoggerConfigurator
from .logs.logger import logger
from .manager.supervisor import ProcessSupervisor
from .relay.core import SessionFactory
from .relay.manager import RelayManager
from .relay.signal_handler import SignalHandler

BrokerConnector = Callable[..., AbstractAsyncContextManager[BrokerClient]]


def load_and_validate(path: str) -> list[ConnectionConfig]:
    """Load the config file and refuse it if any connection is invalid.

    Raises:
        ConfigurationError: Unreadable file or at least one invalid connection.
    """
    connections = load_connections(path)
    ConfigValidator.validate_all(connections)
    return connections


async def run_relay(
    settings: Settings,
    *,
    supervisor: ProcessSupervisor | None = None,
    broker_connector: BrokerConnector = connect_broker,
    session_factory: SessionFactory = establish_session,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Run until SIGINT/SIGTERM (or ``stop_event``) and every loop has closed."""
    connections = load_and_validate(settings.config_path)
    supervisor = supervisor or ProcessSupervisor()
    async with broker_connector(
        settings.mqtt_broker, on_connection_lost=supervisor.terminate
    ) as broker:
        manager = RelayManager(
            connections,
            broker,
            supervisor,
            debug=settings.debug,
            stop_event=stop_event,
            session_factory=session_factory,
        )
        signals = SignalHandler(manager.stop_event)
        signals.setup_signal_handlers()
        try:
            logger.log_event("app", "running", count=len(connections))
            await manager.run()
        finally:
            signals.remove_signal_handlers()


def main(argv: Sequence[str] | None = None, **run_kwargs: Any) -> int:
    """Entry point; returns the process exit status."""
    try:
        settings = load_settings(argv)
    except ConfigurationError as e:
        LoggerConfigurator().configure(register_summary=False)
        log_error("Invalid settings", e)
        return 1

    LoggerConfigurator(debug=settings.debug).configure()
    logger.log_event("app", "start")

    if settings.check_config:
        try:
            connections = load_and_validate(settings.config_path)
        except ConfigurationError as e:
            log_error("Configuration check failed", e)
            return 1
        logger.log_event("app", "config_ok", count=len(connections))
        return 0

    try:
        asyncio.run(run_relay(settings, **run_kwargs))
    except ConfigurationError as e:
        log_error("Refusing to start", e)
        return 1
    except BrokerError as e:
        log_error("Broker unavailable", e)
        return 1
    except KeyboardInterrupt:
        logger.log_event("app", "interrupted")
    logger.log_event("app", "shutdown_complete")
    return 0


def cli() -> None:
    sys.exit(main())
