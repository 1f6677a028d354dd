"""Project logging package.

Contains the event template catalog and the ``RelayLogger`` used for
structured application events. Avoid importing stdlib logging through this
package name externally.
"""

from .event_catalog import EVENT_TEMPLATES, reload_event_templates  # noqa: F401
from .logger import RelayLogger, logger  # noqa: F401

__all__ = ["RelayLogger", "logger", "EVENT_TEMPLATES", "reload_event_templates"]
