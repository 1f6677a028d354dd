"""Relay package: per-connection loops, translation and shutdown coordination."""

from .core import RelayLoop  # noqa: F401
from .manager import RelayManager  # noqa: F401
from .models import RelayState  # noqa: F401
from .signal_handler import SignalHandler  # noqa: F401

__all__ = ["RelayLoop", "RelayManager", "RelayState", "SignalHandler"]
