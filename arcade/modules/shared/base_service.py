"""
Base Service Foundation

Purpose
-------
Foundation class for all domain services in the Arcade engine. Services
implement business logic, open transactions through DatabaseService,
enforce business rules, and emit domain events.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access (ConfigManager dot-path keys)
- Event emission helpers

What this class does NOT do:
- Manage database transactions (that's DatabaseService's job)
- Contain leaderboard or shop rules

Usage
-----
    class ShopService(BaseService):
        def __init__(self, config_manager, event_bus, logger):
            super().__init__(config_manager, event_bus, logger)

        async def purchase(self, player_id: str, avatar_id: str):
            ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from arcade.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from logging import Logger

    from arcade.core.config.manager import ConfigManager
    from arcade.core.event.bus import EventBus


class BaseService:
    """
    Base class for all domain services.

    Args:
        config_manager: Configuration manager (class or instance exposing ``get``)
        event_bus: Event bus for cross-module communication
        logger: Structured logger instance
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config_manager
        self._events = event_bus
        self.log = logger

    def get_config(
        self, key: str, default: Optional[Any] = None, required: bool = False
    ) -> Any:
        """
        Retrieve a configuration value.

        Raises:
            ConfigurationError: If required=True and key is missing
        """
        value = self._config.get(key, default)
        if required and value is None:
            raise ConfigurationError(
                key, f"Required configuration key '{key}' is missing"
            )
        return value

    def get_int_config(self, key: str, default: int, minimum: int = 0) -> int:
        """
        Retrieve an integer configuration value.

        Raises:
            ConfigurationError: If the value is not an integer >= minimum
        """
        value = self.get_config(key, default)
        if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
            raise ConfigurationError(
                key, f"Expected integer >= {minimum}, got {value!r}"
            )
        return value

    async def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Publish a domain event with an optional context merged into the payload."""
        await self._events.publish(event_type, {**data, **(context or {})})

    def log_operation(self, operation: str, **context: Any) -> None:
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )
