"""
Integration Tests for ShopService
=================================

Purchases run against a real SQLite database: balance checks, ownership,
audit rows, rollback of a failed grant and the shop listing.
"""

import pytest
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from arcade.core.database.service import DatabaseService
from arcade.core.exceptions import TransientStorageError
from arcade.database.models import Player, PlayerAvatar, TransactionLog
from arcade.modules.shared.constants import EVENT_AVATAR_PURCHASED


async def _ownerships(player_id):
    async with DatabaseService.get_session() as session:
        result = await session.execute(
            select(PlayerAvatar).where(PlayerAvatar.player_id == player_id)
        )
        return list(result.scalars().all())


async def _audit_rows(player_id):
    async with DatabaseService.get_session() as session:
        result = await session.execute(
            select(TransactionLog).where(TransactionLog.player_id == player_id)
        )
        return list(result.scalars().all())


@pytest.mark.integration
@pytest.mark.database
class TestPurchase:
    async def test_exact_balance_succeeds(self, seed, shop_service):
        # Arrange
        await seed.player("p1", coins=500)
        await seed.avatar("neon_fox", price=500)

        # Act
        result = await shop_service.purchase("p1", "neon_fox")

        # Assert
        assert result.success is True
        assert result.new_balance == 0
        assert result.price_paid == 500
        assert result.reason is None
        assert await seed.coins_of("p1") == 0
        owned = await _ownerships("p1")
        assert [(o.avatar_id, o.acquired_via, o.amount_paid) for o in owned] == [
            ("neon_fox", "shop", 500)
        ]

    async def test_second_purchase_is_already_owned(self, seed, shop_service):
        await seed.player("p1", coins=1000)
        await seed.avatar("neon_fox", price=500)
        await shop_service.purchase("p1", "neon_fox")

        result = await shop_service.purchase("p1", "neon_fox")

        assert result.success is False
        assert result.reason == "ALREADY_OWNED"
        assert await seed.coins_of("p1") == 500

    async def test_insufficient_funds(self, seed, shop_service):
        await seed.player("p1", coins=499)
        await seed.avatar("neon_fox", price=500)

        result = await shop_service.purchase("p1", "neon_fox")

        assert result.success is False
        assert result.reason == "INSUFFICIENT_FUNDS"
        assert result.new_balance is None
        assert await seed.coins_of("p1") == 499
        assert await _ownerships("p1") == []

    async def test_inactive_listing(self, seed, shop_service):
        await seed.player("p1", coins=1000)
        await seed.avatar("retired", price=10, active=False)

        result = await shop_service.purchase("p1", "retired")

        assert result.reason == "ITEM_NOT_AVAILABLE"
        assert await seed.coins_of("p1") == 1000

    async def test_unlisted_avatar(self, seed, shop_service):
        await seed.player("p1", coins=1000)
        await seed.avatar("starter_cat")

        result = await shop_service.purchase("p1", "starter_cat")

        assert result.reason == "ITEM_NOT_AVAILABLE"

    async def test_unknown_player(self, seed, shop_service):
        await seed.avatar("neon_fox", price=500)

        result = await shop_service.purchase("ghost", "neon_fox")

        assert result.success is False
        assert result.reason == "PLAYER_NOT_FOUND"

    async def test_malformed_avatar_id(self, seed, shop_service):
        await seed.player("p1", coins=1000)

        result = await shop_service.purchase("p1", "not an id")

        assert result.success is False
        assert result.reason == "VALIDATION_AVATAR_ID"

    async def test_free_avatar(self, seed, shop_service):
        await seed.player("p1", coins=0)
        await seed.avatar("freebie", price=0)

        result = await shop_service.purchase("p1", "freebie")

        assert result.success is True
        assert result.new_balance == 0

    async def test_writes_audit_row(self, seed, shop_service):
        await seed.player("p1", coins=800)
        await seed.avatar("neon_fox", price=300)

        await shop_service.purchase("p1", "neon_fox")

        rows = await _audit_rows("p1")
        assert len(rows) == 1
        assert rows[0].transaction_type == "avatar_purchase"
        assert rows[0].context == "shop.purchase"
        assert rows[0].details["price"] == 300
        assert rows[0].details["old_balance"] == 800
        assert rows[0].details["new_balance"] == 500

    async def test_failed_purchase_writes_nothing(self, seed, shop_service):
        await seed.player("p1", coins=10)
        await seed.avatar("neon_fox", price=300)

        await shop_service.purchase("p1", "neon_fox")

        assert await _audit_rows("p1") == []

    async def test_publishes_event_on_success_only(self, seed, shop_service, event_bus):
        await seed.player("p1", coins=300)
        await seed.avatar("neon_fox", price=300)
        received = []
        event_bus.subscribe(EVENT_AVATAR_PURCHASED, lambda payload: received.append(payload))

        await shop_service.purchase("p1", "neon_fox")
        await shop_service.purchase("p1", "neon_fox")

        assert len(received) == 1
        assert received[0]["new_balance"] == 0

    async def test_failed_grant_rolls_back_debit(self, seed, shop_service, mocker):
        """A unique-constraint hit on the grant leaves the balance untouched."""
        await seed.player("p1", coins=1000)
        await seed.avatar("neon_fox", price=400)
        await seed.ownership("p1", "neon_fox")
        # Skip the pre-check so the insert itself collides
        mocker.patch.object(
            shop_service._ownership_repo, "exists", mocker.AsyncMock(return_value=False)
        )

        result = await shop_service.purchase("p1", "neon_fox")

        assert result.success is False
        assert result.reason == "ALREADY_OWNED"
        assert await seed.coins_of("p1") == 1000
        assert len(await _ownerships("p1")) == 1
        assert await _audit_rows("p1") == []

    async def test_debit_refuses_when_balance_dropped_after_read(
        self, seed, shop_service, mocker
    ):
        """The conditional debit re-checks the balance in SQL."""
        await seed.player("p1", coins=1000)
        await seed.avatar("neon_fox", price=400)
        locked_read = shop_service._player_repo.get

        async def read_then_drain(session, player_id, for_update=False):
            player = await locked_read(session, player_id, for_update=for_update)
            # The loaded row still says 1000
            await session.execute(
                update(Player)
                .where(Player.id == player_id)
                .values(coins=100)
                .execution_options(synchronize_session=False)
            )
            return player

        mocker.patch.object(shop_service._player_repo, "get", side_effect=read_then_drain)

        result = await shop_service.purchase("p1", "neon_fox")

        assert result.success is False
        assert result.reason == "INSUFFICIENT_FUNDS"
        assert await seed.coins_of("p1") == 1000
        assert await _ownerships("p1") == []
        assert await _audit_rows("p1") == []

    async def test_unrelated_integrity_error_propagates(self, seed, shop_service, mocker):
        await seed.player("p1", coins=1000)
        await seed.avatar("neon_fox", price=400)
        mocker.patch.object(
            shop_service._ownership_repo,
            "flush",
            mocker.AsyncMock(
                side_effect=IntegrityError(
                    "INSERT INTO player_avatars",
                    {},
                    Exception("CHECK constraint failed: amount_paid"),
                )
            ),
        )

        with pytest.raises(IntegrityError):
            await shop_service.purchase("p1", "neon_fox")

        assert await seed.coins_of("p1") == 1000
        assert await _ownerships("p1") == []

    async def test_storage_failure_is_raised(self, seed, shop_service, mocker):
        await seed.player("p1", coins=1000)
        mocker.patch.object(
            shop_service,
            "_execute_purchase",
            mocker.AsyncMock(side_effect=TransientStorageError("purchase", OSError("reset"))),
        )

        with pytest.raises(TransientStorageError):
            await shop_service.purchase("p1", "neon_fox")


@pytest.mark.integration
@pytest.mark.database
class TestListShop:
    async def test_orders_by_price_then_id(self, seed, shop_service):
        await seed.avatar("zed", price=100, image_url="zed.png")
        await seed.avatar("amy", price=100, image_url="https://cdn.example.com/amy.png")
        await seed.avatar("cheap", price=10)
        await seed.avatar("hidden", price=1, active=False)
        await seed.avatar("unlisted")

        listing = await shop_service.list_shop()

        assert [item["avatar_id"] for item in listing] == ["cheap", "amy", "zed"]
        assert listing[1]["image_url"] == "https://cdn.example.com/amy.png"
        assert listing[2]["image_url"] == "/avatars/zed.png"
        assert listing[0]["image_url"] is None
        assert all(item["owned"] is False for item in listing)

    async def test_owned_flags(self, seed, shop_service):
        await seed.player("p1", coins=100)
        await seed.avatar("a1", price=50)
        await seed.avatar("a2", price=60)
        await seed.ownership("p1", "a2")

        listing = await shop_service.list_shop("p1")

        assert {item["avatar_id"]: item["owned"] for item in listing} == {
            "a1": False,
            "a2": True,
        }
