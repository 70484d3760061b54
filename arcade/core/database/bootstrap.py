"""
Database Subsystem Bootstrap

Purpose
-------
Single entry point for bringing the database subsystem up and down: engine
initialization, an optional readiness check, and optional schema creation for
development and test databases.

Non-Responsibilities
--------------------
- Migrations for long-lived databases
- Transaction management (handled by DatabaseService)

Usage Example
-------------
>>> await initialize_database_subsystem(verify_health=True, create_tables=True)
>>> ...
>>> await shutdown_database_subsystem()
"""

from __future__ import annotations

import asyncio

from arcade.core.database.base import Base
from arcade.core.database.service import (
    DatabaseInitializationError,
    DatabaseService,
)
from arcade.core.logging.logger import get_logger

logger = get_logger(__name__)

DEFAULT_HEALTH_TIMEOUT_SECONDS = 5.0


async def create_schema() -> None:
    """Create every table registered on ``Base.metadata`` (idempotent)."""
    # Registers all mapped classes on Base.metadata
    import arcade.database.models  # noqa: F401

    engine = DatabaseService.get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(
        "Database schema ensured",
        extra={"table_count": len(Base.metadata.tables)},
    )


async def drop_schema() -> None:
    """Drop every table registered on ``Base.metadata``. Test use only."""
    import arcade.database.models  # noqa: F401

    engine = DatabaseService.get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    logger.info("Database schema dropped")


async def initialize_database_subsystem(
    verify_health: bool = True,
    create_tables: bool = False,
    health_timeout_seconds: float = DEFAULT_HEALTH_TIMEOUT_SECONDS,
) -> None:
    """
    Initialize DatabaseService, optionally check its health and create tables.

    Raises
    ------
    DatabaseInitializationError
        If initialization fails or the health check fails or times out.
    """
    await DatabaseService.initialize()

    if verify_health:
        try:
            healthy = await asyncio.wait_for(
                DatabaseService.health_check(), timeout=health_timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            raise DatabaseInitializationError(
                f"Database health check timed out after {health_timeout_seconds}s"
            ) from exc

        if not healthy:
            raise DatabaseInitializationError("Database health check failed")

    if create_tables:
        await create_schema()

    logger.info(
        "Database subsystem ready",
        extra={"verify_health": verify_health, "create_tables": create_tables},
    )


async def shutdown_database_subsystem() -> None:
    await DatabaseService.shutdown()
    logger.info("Database subsystem shut down")
