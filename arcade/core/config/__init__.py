"""
Configuration subsystem.

- ``Config``: static settings from the environment (``.env`` aware)
- ``ConfigManager``: YAML-backed tunables in ``arcade.core.config.manager``

Only the static layer is re-exported here; ConfigManager depends on the
logging subsystem, which itself reads Config at import time.
"""

from arcade.core.config.config import Config, Environment

__all__ = ["Config", "Environment"]
