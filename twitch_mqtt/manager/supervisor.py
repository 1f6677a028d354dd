"""Whole-process recovery: re-exec on server RECONNECT, hard exit on fatal faults."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from collections.abc import Awaitable, Callable, Mapping, Sequence

from ..constants import RESTART_DELAY_SECONDS
from ..errors.handling import log_error
from ..logs.logger import logger

Execve = Callable[[str, Sequence[str], Mapping[str, str]], None]


class ProcessSupervisor:
    """Restarts or terminates the whole process on behalf of any relay loop.

    The interpreter path, original argv and environment are captured when the
    supervisor is created so a later restart replays the exact startup.
    Tests inject ``execve``/``exit_process``/``sleep`` to observe the calls instead of
    replacing the test process.
    """

    def __init__(
        self,
        *,
        executable: str | None = None,
        argv: Sequence[str] | None = None,
        env: Mapping[str, str] | None = None,
        delay: float = RESTART_DELAY_SECONDS,
        execve: Execve = os.execve,
        exit_process: Callable[[int], object] = os._exit,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self.executable = executable or sys.executable
        self.argv = list(argv) if argv is not None else [self.executable, *sys.orig_argv[1:]]
        self.env = dict(env) if env is not None else dict(os.environ)
        self.delay = delay
        self._execve = execve
        self._exit = exit_process
        self._sleep = sleep
        self._restarting = False
        self._terminating = False

    @property
    def restarting(self) -> bool:
        return self._restarting

    @property
    def stopping(self) -> bool:
        """True once a restart or termination is under way."""
        return self._restarting or self._terminating

    async def restart(self, reason: str) -> None:
        """Re-execute the process after ``delay``; only the first call acts."""
        if self._restarting:
            return
        self._restarting = True
        logger.log_event(
            "process", "restart_scheduled", level=logging.WARNING, reason=reason, delay=self.delay
        )
        await self._sleep(self.delay)
        _flush_logging()
        try:
            self._execve(self.executable, self.argv, self.env)
        except OSError as e:
            self.terminate(e)

    def terminate(self, error: BaseException) -> None:
        """Log ``error`` and exit immediately with status 1."""
        if self._terminating:
            return
        self._terminating = True
        log_error("Fatal error, terminating process", error, level=logging.CRITICAL)
        _flush_logging()
        self._exit(1)


def _flush_logging() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()
    sys.stdout.flush()
    sys.stderr.flush()
