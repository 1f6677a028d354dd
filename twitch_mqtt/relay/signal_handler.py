"""SignalHandler - turns SIGINT/SIGTERM into the shared stop event."""

from __future__ import annotations

import asyncio
import logging
import signal

from ..logs.logger import logger

_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SignalHandler:
    """Handler for process signals and shutdown initiation."""

    def __init__(self, stop_event: asyncio.Event) -> None:
        self.stop_event = stop_event
        self.shutdown_initiated = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._installed: list[signal.Signals] = []

    def stop(self) -> None:
        """Initiate shutdown of every relay loop (idempotent)."""
        self.shutdown_initiated = True
        self.stop_event.set()

    def handle_signal(self, signum: int) -> None:
        if self.shutdown_initiated:
            return
        logger.log_event(
            "app", "signal_received", level=logging.WARNING, signal=signal.Signals(signum).name
        )
        self.stop()

    def setup_signal_handlers(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Install handlers for SIGINT and SIGTERM on the running loop."""
        self._loop = loop or asyncio.get_running_loop()
        for sig in _SIGNALS:
            try:
                self._loop.add_signal_handler(sig, self.handle_signal, sig)
            except NotImplementedError:  # pragma: no cover - Windows event loops
                signal.signal(sig, self._threadsafe_handler)
            self._installed.append(sig)

    def _threadsafe_handler(self, signum: int, _frame: object | None) -> None:  # pragma: no cover
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self.handle_signal, signum)

    def remove_signal_handlers(self) -> None:
        if self._loop is None:
            return
        for sig in self._installed:
            try:
                self._loop.remove_signal_handler(sig)
            except NotImplementedError:  # pragma: no cover
                signal.signal(sig, signal.SIG_DFL)
        self._installed.clear()
