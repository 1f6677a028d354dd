from __future__ import annotations

import asyncio
import os
import signal
from unittest.mock import Mock

import pytest

from twitch_mqtt.relay.signal_handler import SignalHandler


def test_stop_sets_event():
    """Test a signal sets the stop event."""
    event = asyncio.Event()
    handler = SignalHandler(event)
    handler.stop()
    assert handler.shutdown_initiated is True
    assert event.is_set()


def test_handle_signal_is_idempotent(caplog):
    """Test repeated signals are handled once."""
    event = asyncio.Event()
    handler = SignalHandler(event)
    handler.handle_signal(signal.SIGINT)
    handler.handle_signal(signal.SIGTERM)
    assert event.is_set()
    received = [r for r in caplog.records if "SIG" in r.getMessage()]
    assert len(received) == 1


def test_setup_registers_both_signals():
    """Test setup registers SIGINT and SIGTERM."""
    loop = Mock()
    handler = SignalHandler(asyncio.Event())
    handler.setup_signal_handlers(loop)
    registered = [c.args[0] for c in loop.add_signal_handler.call_args_list]
    assert registered == [signal.SIGINT, signal.SIGTERM]
    handler.remove_signal_handlers()
    removed = [c.args[0] for c in loop.remove_signal_handler.call_args_list]
    assert removed == [signal.SIGINT, signal.SIGTERM]


def test_remove_without_setup_is_noop():
    """Test removing handlers before setup does nothing."""
    SignalHandler(asyncio.Event()).remove_signal_handlers()


@pytest.mark.asyncio
@pytest.mark.skipif(not hasattr(signal, "SIGTERM") or os.name == "nt", reason="POSIX only")
async def test_real_sigterm_sets_stop_event():
    """Test a real SIGTERM sets the stop event."""
    event = asyncio.Event()
    handler = SignalHandler(event)
    handler.setup_signal_handlers()
    try:
        os.kill(os.getpid(), signal.SIGTERM)
        await asyncio.wait_for(event.wait(), timeout=1)
    finally:
        handler.remove_signal_handlers()
    assert handler.shutdown_initiated is True
