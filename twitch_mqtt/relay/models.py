"""Relay loop data models."""

from __future__ import annotations

from enum import IntEnum


class RelayState(IntEnum):
    """Lifecycle of one relay loop; transitions only move forward."""

    STARTING = 0
    RUNNING = 1
    DRAINING = 2
    CLOSED = 3
