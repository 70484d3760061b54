"""
ConfigManager: YAML-backed tunable configuration for the Arcade engine.

Purpose
-------
Provide read access to gameplay tunables (profile sizes, leaderboard limits,
shop defaults, avatar image paths, tier thresholds) through dot-notation keys,
backed by YAML files under the configured ``config/`` directory.

Responsibilities
----------------
- Recursively load and deep-merge every ``*.yaml`` / ``*.yml`` file
- Resolve dot-notation keys (``"profile.top_games_limit"``) with defaults
- Allow in-process overrides for hosts and tests without touching files

Non-Responsibilities
--------------------
- Environment/static settings (handled by Config)
- Validation of business rules (handled by services)

Key Design Decisions
--------------------
- Class-level state, no instantiation; services receive the class itself
- Lazy load on first ``get()`` so importing never touches the filesystem
- Overrides are layered on top of YAML defaults and win on lookup

Dependencies
------------
- PyYAML for parsing
- Config.CONFIG_DIR for the directory location
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional

import yaml

from arcade.core.config.config import Config
from arcade.core.logging.logger import get_logger

logger = get_logger(__name__)

_MISSING = object()


class ConfigManagerError(RuntimeError):
    """Base class for ConfigManager failures."""


class ConfigInitializationError(ConfigManagerError):
    """Raised when YAML defaults cannot be parsed."""


__all__ = ["ConfigManager", "ConfigManagerError", "ConfigInitializationError"]


class ConfigManager:
    """
    Read-mostly configuration store with YAML defaults and runtime overrides.

    Examples
    --------
    >>> limit = ConfigManager.get("profile.top_games_limit", 3)
    >>> ConfigManager.override("leaderboard.daily_limit", 10)
    """

    _defaults: Dict[str, Any] = {}
    _overrides: Dict[str, Any] = {}
    _loaded: bool = False
    _config_dir: Optional[Path] = None

    # =========================================================================
    # YAML LOADING
    # =========================================================================

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: MutableMapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge_dict(target[key], value)  # type: ignore[arg-type]
            else:
                target[key] = value

    @classmethod
    def load(cls, config_dir: Optional[Path] = None) -> None:
        """
        Load all YAML files from ``config_dir`` (default ``Config.CONFIG_DIR``).

        A missing directory is not an error; built-in call-site defaults
        apply. A malformed YAML file is.

        Raises
        ------
        ConfigInitializationError
            If a YAML file cannot be parsed.
        """
        directory = Path(config_dir) if config_dir is not None else Path(Config.CONFIG_DIR)
        cls._defaults = {}
        cls._config_dir = directory
        cls._loaded = True

        if not directory.exists():
            logger.warning(
                "Config directory not found; using call-site defaults only",
                extra={"config_dir": str(directory)},
            )
            return

        yaml_files = sorted(directory.rglob("*.yaml")) + sorted(directory.rglob("*.yml"))
        loaded_count = 0

        for yaml_file in yaml_files:
            try:
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                logger.error(
                    "Failed to parse YAML config",
                    extra={"file": str(yaml_file), "error": str(exc)},
                )
                raise ConfigInitializationError(
                    f"Invalid YAML in {yaml_file}: {exc}"
                ) from exc

            if isinstance(data, dict):
                cls._deep_merge_dict(cls._defaults, data)
                loaded_count += 1
            elif data is not None:
                logger.warning(
                    "Ignoring non-dict YAML root object",
                    extra={"file": str(yaml_file), "root_type": type(data).__name__},
                )

        logger.info(
            "YAML configs loaded",
            extra={
                "config_dir": str(directory),
                "yaml_file_count": loaded_count,
                "top_level_keys": sorted(cls._defaults.keys()),
            },
        )

    @classmethod
    def _ensure_loaded(cls) -> None:
        if not cls._loaded:
            cls.load()

    # =========================================================================
    # READ API
    # =========================================================================

    @staticmethod
    def _resolve(tree: Dict[str, Any], key: str) -> Any:
        value: Any = tree
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return _MISSING
            value = value[part]
        return value

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Overrides win over YAML defaults; ``default`` is returned when the key
        is absent from both.

        Examples
        --------
        >>> ConfigManager.get("avatars.image_base_path", "/avatars/")
        '/avatars/'
        """
        cls._ensure_loaded()

        if key in cls._overrides:
            return cls._overrides[key]

        value = cls._resolve(cls._defaults, key)
        if value is _MISSING or value is None:
            return default
        return value

    @classmethod
    def get_all_keys(cls) -> List[str]:
        """Top-level keys currently known (YAML plus overrides)."""
        cls._ensure_loaded()
        keys = set(cls._defaults.keys())
        keys.update(k.split(".", 1)[0] for k in cls._overrides)
        return sorted(keys)

    # =========================================================================
    # OVERRIDES
    # =========================================================================

    @classmethod
    def override(cls, key: str, value: Any) -> None:
        """Set an in-process override for a full dot key."""
        cls._overrides[key] = value
        logger.debug(
            "Configuration override applied",
            extra={"config_key": key},
        )

    @classmethod
    def clear_overrides(cls) -> None:
        cls._overrides = {}

    @classmethod
    def reset(cls) -> None:
        """Forget loaded YAML and overrides; next read reloads from disk."""
        cls._defaults = {}
        cls._overrides = {}
        cls._loaded = False
        cls._config_dir = None
