"""RelayManager - starts one relay loop per connection and coordinates shutdown."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from ..errors.handling import log_error
from ..irc.session import establish_session
from ..logs.logger import logger
from .core import RelayLoop, SessionFactory

if TYPE_CHECKING:  # pragma: no cover
    from ..broker.client import BrokerClient
    from ..config.model import ConnectionConfig
    from ..manager.supervisor import ProcessSupervisor


class RelayManager:
    """Runs every relay loop and drains them on shutdown.

    Attributes:
        loops: One ``RelayLoop`` per configured connection.
        tasks: The asyncio tasks running those loops.
        stop_event: Shared stop signal; setting it makes every loop quit.
    """

    def __init__(
        self,
        connections: Iterable[ConnectionConfig],
        broker: BrokerClient,
        supervisor: ProcessSupervisor,
        *,
        debug: bool = False,
        stop_event: asyncio.Event | None = None,
        session_factory: SessionFactory = establish_session,
    ) -> None:
        self.stop_event = stop_event or asyncio.Event()
        self.supervisor = supervisor
        self.loops = [
            RelayLoop(
                conn,
                broker,
                self.stop_event,
                supervisor,
                debug=debug,
                session_factory=session_factory,
            )
            for conn in connections
        ]
        self.tasks: list[asyncio.Task[Any]] = []

    def start(self) -> None:
        logger.log_event("manager", "starting", count=len(self.loops))
        for loop in self.loops:
            self.tasks.append(asyncio.create_task(loop.run(), name=f"relay-{loop.nick}"))

    def stop(self) -> None:
        self.stop_event.set()

    async def wait_closed(self) -> None:
        """Block until every loop has reached ``CLOSED``."""
        results = await asyncio.gather(*self.tasks, return_exceptions=True)
        for loop, result in zip(self.loops, results, strict=True):
            if isinstance(result, asyncio.CancelledError):
                continue
            if isinstance(result, Exception):
                log_error("Relay loop crashed", result, context={"nick": loop.nick})

    async def _warn_when_all_closed(self) -> None:
        if self.tasks:
            await asyncio.wait(self.tasks)
        if not self.stop_event.is_set():
            logger.log_event("manager", "all_closed", level=logging.WARNING)

    async def run(self) -> None:
        """Start all loops, wait for the stop signal, then drain every loop."""
        self.start()
        watcher = asyncio.create_task(self._warn_when_all_closed(), name="relay-watcher")
        try:
            await self.stop_event.wait()
            logger.log_event("manager", "shutdown_initiated", level=logging.WARNING)
            await self.wait_closed()
            logger.log_event("manager", "shutdown_complete")
        finally:
            watcher.cancel()
            await asyncio.gather(watcher, return_exceptions=True)
