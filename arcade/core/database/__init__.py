from arcade.core.database.base import Base, IdMixin, TimestampMixin, utc_now
from arcade.core.database.bootstrap import (
    create_schema,
    drop_schema,
    initialize_database_subsystem,
    shutdown_database_subsystem,
)
from arcade.core.database.service import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    DatabaseService,
)

__all__ = [
    "Base",
    "IdMixin",
    "TimestampMixin",
    "utc_now",
    "DatabaseService",
    "DatabaseInitializationError",
    "DatabaseNotInitializedError",
    "create_schema",
    "drop_schema",
    "initialize_database_subsystem",
    "shutdown_database_subsystem",
]
