"""
Integration Tests for DatabaseService
=====================================

Purpose
-------
Exercise the engine and session lifecycle against a real SQLite file:
transaction commit/rollback, error translation and schema creation.

Test Coverage
-------------
- Session and transaction context managers
- Commit on success, rollback on exception
- IntegrityError passes through; other driver failures become
  TransientStorageError
- Use before initialization
- Schema bootstrap and health check
"""

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError

from arcade.core.database.bootstrap import initialize_database_subsystem
from arcade.core.database.service import (
    DatabaseNotInitializedError,
    DatabaseService,
    violates_unique_constraint,
)
from arcade.core.exceptions import TransientStorageError
from arcade.database.models import Player, PlayerAvatar
from arcade.database.models.economy.player_avatar import OWNERSHIP_UNIQUE_CONSTRAINT


# ============================================================================
# DATABASE CONNECTION TESTS
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestDatabaseConnection:
    async def test_database_connection(self, database):
        async with DatabaseService.get_session() as session:
            result = await session.execute(text("SELECT 1 AS value"))
            row = result.fetchone()

        assert row is not None
        assert row.value == 1

    async def test_schema_created(self, database):
        async with DatabaseService.get_engine().connect() as conn:
            result = await conn.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'table'")
            )
            tables = {row.name for row in result.fetchall()}

        assert {
            "players",
            "games",
            "scores",
            "avatars",
            "shop_items",
            "player_avatars",
            "transaction_logs",
            "daily_challenges",
            "challenge_progress",
            "daily_bonus_claims",
        } <= tables

    async def test_health_check(self, database):
        assert await DatabaseService.health_check() is True

    async def test_bootstrap_is_idempotent(self, database):
        await initialize_database_subsystem(verify_health=True, create_tables=True)

        assert await DatabaseService.health_check() is True


# ============================================================================
# TRANSACTION TESTS
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestDatabaseTransactions:
    async def test_transaction_commits(self, database):
        # Act
        async with DatabaseService.get_transaction() as session:
            session.add(Player(id="p1", display_name="Ada", coins=10, xp=0))

        # Assert
        async with DatabaseService.get_session() as session:
            player = await session.get(Player, "p1")
        assert player is not None
        assert player.created_at is not None

    async def test_exception_rolls_back(self, database):
        with pytest.raises(RuntimeError):
            async with DatabaseService.get_transaction() as session:
                session.add(Player(id="p1", display_name="Ada", coins=10, xp=0))
                await session.flush()
                raise RuntimeError("abort")

        async with DatabaseService.get_session() as session:
            assert await session.get(Player, "p1") is None

    async def test_integrity_error_passes_through(self, seed):
        await seed.player("p1")
        await seed.avatar("neon_fox")
        await seed.ownership("p1", "neon_fox")

        with pytest.raises(IntegrityError) as exc_info:
            async with DatabaseService.get_transaction() as session:
                session.add(PlayerAvatar(player_id="p1", avatar_id="neon_fox", acquired_via="grant"))

        assert violates_unique_constraint(
            exc_info.value, PlayerAvatar.__table__, OWNERSHIP_UNIQUE_CONSTRAINT
        )

        async with DatabaseService.get_session() as session:
            rows = (await session.execute(select(PlayerAvatar))).scalars().all()
        assert len(rows) == 1


# ============================================================================
# ERROR HANDLING TESTS
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestDatabaseErrorHandling:
    async def test_read_failure_becomes_transient_error(self, database):
        with pytest.raises(TransientStorageError) as exc_info:
            async with DatabaseService.get_session() as session:
                await session.execute(text("SELECT * FROM nonexistent_table"))

        assert exc_info.value.original_error is not None

    async def test_write_failure_becomes_transient_error(self, database):
        with pytest.raises(TransientStorageError):
            async with DatabaseService.get_transaction() as session:
                await session.execute(text("UPDATE nonexistent_table SET x = 1"))

    async def test_use_before_initialize(self):
        with pytest.raises(DatabaseNotInitializedError):
            async with DatabaseService.get_session():
                pass


# ============================================================================
# CONSTRAINT MATCHING TESTS
# ============================================================================


@pytest.mark.unit
class TestUniqueConstraintMatching:
    def test_postgres_message_matches_by_name(self):
        exc = IntegrityError(
            "INSERT INTO player_avatars",
            {},
            Exception(
                'duplicate key value violates unique constraint "uq_player_avatars_player_avatar"'
            ),
        )

        assert violates_unique_constraint(
            exc, PlayerAvatar.__table__, OWNERSHIP_UNIQUE_CONSTRAINT
        )

    def test_other_violation_does_not_match(self):
        exc = IntegrityError(
            "INSERT INTO player_avatars",
            {},
            Exception("NOT NULL constraint failed: player_avatars.acquired_via"),
        )

        assert not violates_unique_constraint(
            exc, PlayerAvatar.__table__, OWNERSHIP_UNIQUE_CONSTRAINT
        )

    def test_unknown_constraint_name_is_rejected(self):
        exc = IntegrityError("INSERT", {}, Exception("boom"))

        with pytest.raises(ValueError):
            violates_unique_constraint(exc, PlayerAvatar.__table__, "uq_missing")
