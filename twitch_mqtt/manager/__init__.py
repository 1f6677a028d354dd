"""Process-level management helpers."""

from .supervisor import ProcessSupervisor  # noqa: F401

__all__ = ["ProcessSupervisor"]
