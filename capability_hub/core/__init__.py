"""Ambient infrastructure shared by every capability hub subpackage.

- ``core.config``: pydantic-settings based configuration (``settings``).
- ``core.logging_config``: logging setup helpers. The library never
  configures logging itself; an entry point calls ``setup_logging()`` once
  at startup, which reads ``CAPABILITY_HUB_LOG_LEVEL`` and friends.
"""

from .config import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
