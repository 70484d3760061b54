"""
Core infrastructure layer for the Arcade engine.

- Configuration (``arcade.core.config``: Config, ConfigManager)
- Database subsystem (``arcade.core.database``: DatabaseService, schema bootstrap)
- Logging (``arcade.core.logging``: structured logging, LogContext)
- Events (``arcade.core.event``: EventBus)
- Caching (``arcade.core.cache``: AvatarImageCache)
- Validation (``arcade.core.validation``: InputValidator)
- Infrastructure exceptions (``arcade.core.exceptions``)

Subsystems are imported from their own packages; this module re-exports
nothing so that importing one subsystem never drags in the others.
"""
