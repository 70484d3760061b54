"""
Database Service - Core Infrastructure Layer

Purpose
-------
Centralized async database engine and session management for the Arcade
engine. Provides atomic transactions, pessimistic locking support, health
checks, and a single place where driver failures become
``TransientStorageError``.

Responsibilities
----------------
- Initialize and manage a single AsyncEngine instance with connection pooling
- Provide async context managers for read sessions and atomic transactions
- Enforce transaction discipline: automatic commit on success, rollback on exception
- Translate operational/DBAPI failures into TransientStorageError
- Configure statement timeouts for PostgreSQL connections
- Provide idempotent initialization with async lock protection

Non-Responsibilities
--------------------
- Retry policies (callers decide; nothing here retries)
- Database migrations
- Domain logic or business rules

Architecture Notes
------------------
**Transaction Model**:
- `get_transaction()` is the primary interface for all state mutations
- Automatic commit on success, rollback on any exception
- Never call `session.commit()` inside service code
- `IntegrityError` is re-raised untouched so services can map unique
  constraint violations to domain outcomes

**Connection Pooling**:
- AsyncAdaptedQueuePool outside tests (pool_size / max_overflow from Config)
- NullPool when Config.TESTING is set (no connection reuse)

Usage Example
-------------
>>> async with DatabaseService.get_transaction() as session:
>>>     player = await session.get(Player, player_id, with_for_update=True)
>>>     player.coins -= price

>>> async with DatabaseService.get_session() as session:
>>>     result = await session.execute(select(Game))
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Optional, Type

from sqlalchemy import Table, UniqueConstraint, text
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool, Pool

from arcade.core.config.config import Config
from arcade.core.exceptions import TransientStorageError
from arcade.core.logging.logger import get_logger

logger = get_logger(__name__)

_STORAGE_ERRORS = (OperationalError, DBAPIError, OSError)


# ============================================================================
# Lifecycle Exceptions
# ============================================================================


class DatabaseInitializationError(RuntimeError):
    """Raised when database engine initialization fails."""


class DatabaseNotInitializedError(RuntimeError):
    """Raised when database operations are attempted before initialization."""


# ============================================================================
# Constraint Helpers
# ============================================================================


def violates_unique_constraint(exc: IntegrityError, table: Table, name: str) -> bool:
    """
    True if ``exc`` was raised by the unique constraint ``name`` on ``table``.

    PostgreSQL reports the constraint name; SQLite reports the constrained
    columns as ``table.column`` pairs, in declaration order.
    """
    constraint = next(
        (
            c
            for c in table.constraints
            if isinstance(c, UniqueConstraint) and c.name == name
        ),
        None,
    )
    if constraint is None:
        raise ValueError(f"Table {table.name!r} has no unique constraint {name!r}")

    message = str(exc.orig)
    if name in message:
        return True
    columns = ", ".join(f"{table.name}.{column.name}" for column in constraint.columns)
    return f"UNIQUE constraint failed: {columns}" in message


# ============================================================================
# Configuration Snapshot
# ============================================================================


@dataclass(frozen=True)
class _DatabaseConfigSnapshot:
    """Immutable snapshot of database configuration for the engine's lifetime."""

    url: str
    echo: bool
    pool_class: Type[Pool]
    pool_size: int
    max_overflow: int
    pool_recycle: int
    pool_timeout: int
    statement_timeout_ms: int

    @property
    def is_postgres(self) -> bool:
        return self.url.startswith(("postgresql://", "postgresql+asyncpg://"))

    @property
    def url_scheme(self) -> str:
        return self.url.split(":", 1)[0] if ":" in self.url else "unknown"


# ============================================================================
# DatabaseService - Core Infrastructure
# ============================================================================


class DatabaseService:
    """
    Centralized async database engine and session management.

    Public API
    ----------
    - initialize() / shutdown()
    - get_session() -> read session, no automatic commit
    - get_transaction() -> atomic write transaction (preferred for writes)
    - health_check() -> fast reachability check
    - get_engine() -> the live AsyncEngine (schema bootstrap, tests)
    """

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    _config_snapshot: Optional[_DatabaseConfigSnapshot] = None
    _init_lock: Optional[asyncio.Lock] = None

    # ========================================================================
    # Initialization & Shutdown
    # ========================================================================

    @classmethod
    def _get_init_lock(cls) -> asyncio.Lock:
        # Created lazily so the lock binds to the running loop
        if cls._init_lock is None:
            cls._init_lock = asyncio.Lock()
        return cls._init_lock

    @classmethod
    def _build_config_snapshot(cls) -> _DatabaseConfigSnapshot:
        """
        Build an immutable configuration snapshot from Config.

        Raises
        ------
        DatabaseInitializationError
            If DATABASE_URL is missing or invalid.
        """
        database_url = getattr(Config, "DATABASE_URL", None)
        if not database_url or not isinstance(database_url, str):
            logger.error("DATABASE_URL is not configured or invalid")
            raise DatabaseInitializationError(
                "DATABASE_URL must be configured as a non-empty string"
            )

        pool_class: Type[Pool] = NullPool if Config.is_testing() else AsyncAdaptedQueuePool

        snapshot = _DatabaseConfigSnapshot(
            url=database_url,
            echo=bool(Config.DATABASE_ECHO),
            pool_class=pool_class,
            pool_size=int(Config.DATABASE_POOL_SIZE),
            max_overflow=int(Config.DATABASE_MAX_OVERFLOW),
            pool_recycle=int(Config.DATABASE_POOL_RECYCLE),
            pool_timeout=int(Config.DATABASE_POOL_TIMEOUT),
            statement_timeout_ms=int(Config.DATABASE_STATEMENT_TIMEOUT_MS),
        )

        logger.debug(
            "Database configuration snapshot created",
            extra={
                "url_scheme": snapshot.url_scheme,
                "pool_class": pool_class.__name__,
                "pool_size": snapshot.pool_size,
                "max_overflow": snapshot.max_overflow,
            },
        )
        return snapshot

    @classmethod
    async def initialize(cls) -> None:
        """
        Initialize the database engine and session factory.

        Idempotent: returns immediately when already initialized.

        Raises
        ------
        DatabaseInitializationError
            If configuration is invalid or engine creation fails.
        """
        async with cls._get_init_lock():
            if cls._engine is not None:
                logger.debug("DatabaseService already initialized; skipping")
                return

            logger.info("Initializing DatabaseService")

            try:
                config = cls._build_config_snapshot()

                engine_kwargs: dict[str, Any] = {
                    "echo": config.echo,
                    "poolclass": config.pool_class,
                }
                if config.pool_class is AsyncAdaptedQueuePool:
                    engine_kwargs.update(
                        {
                            "pool_size": config.pool_size,
                            "max_overflow": config.max_overflow,
                            "pool_recycle": config.pool_recycle,
                            "pool_timeout": config.pool_timeout,
                            "pool_pre_ping": True,
                        }
                    )

                cls._engine = create_async_engine(config.url, **engine_kwargs)
                cls._session_factory = async_sessionmaker(
                    bind=cls._engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                )
                cls._config_snapshot = config

            except Exception as exc:
                logger.error(
                    "DatabaseService initialization failed",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )
                if isinstance(exc, DatabaseInitializationError):
                    raise
                raise DatabaseInitializationError(
                    f"Database initialization failed: {exc}"
                ) from exc

            logger.info(
                "DatabaseService initialized successfully",
                extra={
                    "url_scheme": config.url_scheme,
                    "pool_class": config.pool_class.__name__,
                },
            )

    @classmethod
    async def shutdown(cls) -> None:
        """Dispose the engine and reset internal state. Safe to call twice."""
        async with cls._get_init_lock():
            if cls._engine is None:
                logger.debug("DatabaseService not initialized; nothing to shutdown")
                return

            logger.info("Shutting down DatabaseService")
            try:
                await cls._engine.dispose()
                logger.info("DatabaseService shutdown complete")
            finally:
                cls._engine = None
                cls._session_factory = None
                cls._config_snapshot = None

    @classmethod
    def get_engine(cls) -> AsyncEngine:
        cls._ensure_initialized()
        assert cls._engine is not None
        return cls._engine

    # ========================================================================
    # Health Check
    # ========================================================================

    @classmethod
    async def health_check(cls) -> bool:
        """
        Execute ``SELECT 1``; returns False instead of raising on failure.
        """
        if cls._engine is None:
            logger.warning("Health check called on uninitialized DatabaseService")
            return False

        start = time.perf_counter()
        try:
            async with cls._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except _STORAGE_ERRORS as exc:
            logger.warning(
                "Database health check failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return False
        finally:
            logger.debug(
                "Database health check completed",
                extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
            )

    # ========================================================================
    # Session & Transaction Context Managers
    # ========================================================================

    @classmethod
    def _ensure_initialized(cls) -> None:
        if cls._session_factory is None or cls._engine is None:
            logger.error("DatabaseService operation attempted before initialization")
            raise DatabaseNotInitializedError(
                "DatabaseService must be initialized before use. "
                "Call DatabaseService.initialize() during startup."
            )

    @classmethod
    async def _apply_statement_timeout(cls, session: AsyncSession) -> None:
        config = cls._config_snapshot
        if config is not None and config.is_postgres:
            await session.execute(
                text(f"SET LOCAL statement_timeout = {int(config.statement_timeout_ms)}")
            )

    @classmethod
    @asynccontextmanager
    async def get_session(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Create a database session without automatic commit.

        Use for read-only operations. Storage failures inside the block are
        raised as TransientStorageError.

        Raises
        ------
        DatabaseNotInitializedError
            If DatabaseService has not been initialized.
        TransientStorageError
            If the store fails while the session is in use.
        """
        cls._ensure_initialized()
        assert cls._session_factory is not None

        start = time.perf_counter()
        async with cls._session_factory() as session:
            try:
                await cls._apply_statement_timeout(session)
                yield session
            except IntegrityError:
                raise
            except _STORAGE_ERRORS as exc:
                logger.warning(
                    "Storage error in read session",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                )
                raise TransientStorageError("read", exc) from exc
            finally:
                logger.debug(
                    "Database session closed",
                    extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
                )

    @classmethod
    @asynccontextmanager
    async def get_transaction(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Create a database session wrapped in an atomic transaction.

        This is the **primary interface for all state mutations**.

        Behavior
        --------
        - Commits when the block exits normally
        - Rolls back on any exception, then re-raises it
        - Operational/DBAPI failures (other than IntegrityError) are re-raised
          as TransientStorageError

        Raises
        ------
        DatabaseNotInitializedError
            If DatabaseService has not been initialized.
        IntegrityError
            On constraint violations, for the caller to interpret.
        TransientStorageError
            On any other storage failure, including at commit.
        """
        cls._ensure_initialized()
        assert cls._session_factory is not None

        start = time.perf_counter()
        async with cls._session_factory() as session:
            try:
                await cls._apply_statement_timeout(session)
                yield session
                await session.commit()
                logger.debug(
                    "Database transaction committed",
                    extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
                )

            except IntegrityError as exc:
                await session.rollback()
                logger.info(
                    "IntegrityError in transaction; rolled back",
                    extra={"error_type": type(exc).__name__},
                )
                raise

            except _STORAGE_ERRORS as exc:
                await session.rollback()
                logger.error(
                    "Storage error in transaction; rolled back",
                    extra={
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                        "duration_ms": (time.perf_counter() - start) * 1000.0,
                    },
                    exc_info=True,
                )
                raise TransientStorageError("transaction", exc) from exc

            except Exception as exc:
                await session.rollback()
                logger.debug(
                    "Transaction rolled back",
                    extra={
                        "error_type": type(exc).__name__,
                        "duration_ms": (time.perf_counter() - start) * 1000.0,
                    },
                )
                raise
