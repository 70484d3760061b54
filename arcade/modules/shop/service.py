"""
Shop Service
============

Purpose
-------
Avatar shop: listing what is for sale and buying avatars with coins.

Purchase Transaction
--------------------
A purchase is one database transaction with these steps, in order:

1. Active listing for the avatar, else ``ItemNotAvailableError``
2. Existing ownership, else continue; owned -> ``AlreadyOwnedError``
3. Player row locked (``SELECT ... FOR UPDATE``); missing -> ``NotFoundError``;
   balance below price -> ``InsufficientFundsError``
4. Conditional debit ``coins = coins - price WHERE coins >= price``; no row
   updated -> ``InsufficientFundsError``
5. Ownership insert; a violation of the ownership unique constraint ->
   ``AlreadyOwnedError``, any other integrity error propagates
6. Audit row in ``transaction_logs``

Any failure rolls back the whole transaction, so a failed grant never leaves
a debit behind. The debit and the ownership unique constraint keep the
storage layer consistent even when two purchases race.

Outcomes
--------
``purchase()`` turns domain outcomes into ``PurchaseResult(success=False,
reason=<error code>)``. ``TransientStorageError`` is raised to the caller.
Nothing here retries.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arcade.core.cache.avatar_image_cache import resolve_image_url
from arcade.core.database.service import DatabaseService, violates_unique_constraint
from arcade.core.logging.logger import LogContext, get_logger
from arcade.core.validation.input_validator import InputValidator
from arcade.database.models import (
    Avatar,
    Player,
    PlayerAvatar,
    ShopItem,
    TransactionLog,
    TransactionType,
)
from arcade.database.models.economy.player_avatar import OWNERSHIP_UNIQUE_CONSTRAINT
from arcade.modules.shared.base_repository import BaseRepository
from arcade.modules.shared.base_service import BaseService
from arcade.modules.shared.constants import (
    DEFAULT_AVATAR_BASE_PATH,
    EVENT_AVATAR_PURCHASED,
    SHOP_ACQUISITION_SOURCE,
)
from arcade.modules.shared.exceptions import (
    AlreadyOwnedError,
    ArcadeDomainException,
    InsufficientFundsError,
    ItemNotAvailableError,
    NotFoundError,
)

if TYPE_CHECKING:
    from logging import Logger

    from arcade.core.config.manager import ConfigManager
    from arcade.core.event.bus import EventBus


@dataclass(frozen=True)
class PurchaseResult:
    """
    Outcome of a purchase attempt.

    ``reason`` is the failing exception's ``error_code`` (for example
    ``"INSUFFICIENT_FUNDS"``); ``new_balance`` is set only on success.
    """

    success: bool
    avatar_id: str
    new_balance: Optional[int] = None
    price_paid: Optional[int] = None
    reason: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ShopService(BaseService):
    """
    Service for the avatar shop.

    Public Methods
    --------------
    - purchase() -> Buy an avatar (PurchaseResult)
    - list_shop() -> Active listings with ownership flags
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)

        self._shop_repo = BaseRepository(ShopItem, get_logger(f"{__name__}.ShopItemRepository"))
        self._ownership_repo = BaseRepository(
            PlayerAvatar, get_logger(f"{__name__}.PlayerAvatarRepository")
        )
        self._player_repo = BaseRepository(Player, get_logger(f"{__name__}.PlayerRepository"))
        self._audit_repo = BaseRepository(
            TransactionLog, get_logger(f"{__name__}.TransactionLogRepository")
        )

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def purchase(self, player_id: str, avatar_id: str) -> PurchaseResult:
        """
        Buy an avatar for a player.

        This is a **write operation** using get_transaction() with pessimistic
        locking on the player row.

        Returns:
            PurchaseResult with ``success=True`` and the new balance, or
            ``success=False`` and the reason code

        Raises:
            TransientStorageError: If the store fails; the transaction is
                rolled back and nothing changed

        Example:
            >>> result = await shop.purchase("p1", "neon_fox")
            >>> result.success, result.new_balance
            (True, 0)
        """
        async with LogContext(player_id=player_id, component="shop", operation="purchase"):
            try:
                player_id = InputValidator.validate_player_id(player_id)
                avatar_id = InputValidator.validate_avatar_id(avatar_id)
                old_balance, new_balance, price = await self._execute_purchase(
                    player_id, avatar_id
                )
            except ArcadeDomainException as exc:
                self.log.info(
                    f"Purchase rejected: {exc.error_code}",
                    extra={
                        "player_id": player_id,
                        "avatar_id": avatar_id,
                        "reason": exc.error_code,
                        "details": exc.details,
                    },
                )
                return PurchaseResult(
                    success=False,
                    avatar_id=avatar_id,
                    reason=exc.error_code,
                    message=exc.message,
                )

            self.log_operation(
                "purchase",
                player_id=player_id,
                avatar_id=avatar_id,
                price=price,
                old_balance=old_balance,
                new_balance=new_balance,
            )
            await self.emit_event(
                EVENT_AVATAR_PURCHASED,
                {
                    "player_id": player_id,
                    "avatar_id": avatar_id,
                    "price": price,
                    "new_balance": new_balance,
                },
            )
            return PurchaseResult(
                success=True,
                avatar_id=avatar_id,
                new_balance=new_balance,
                price_paid=price,
            )

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def list_shop(self, player_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Active listings ordered by price, then avatar id.

        Args:
            player_id: When given, each entry carries ``owned`` for that player

        Returns:
            List of ``{avatar_id, name, tier, image_url, price, owned}``
        """
        if player_id is not None:
            player_id = InputValidator.validate_player_id(player_id)
        base_path = self.get_config("avatars.image_base_path", DEFAULT_AVATAR_BASE_PATH)

        async with DatabaseService.get_session() as session:
            stmt = (
                select(ShopItem, Avatar)
                .join(Avatar, Avatar.id == ShopItem.avatar_id)
                .where(ShopItem.is_active.is_(True))
                .order_by(ShopItem.price.asc(), ShopItem.avatar_id.asc())
            )
            rows = (await session.execute(stmt)).all()

            owned: set[str] = set()
            if player_id is not None:
                owned = set(
                    await self._ownership_repo.scalar_values_where(
                        session, PlayerAvatar.avatar_id, PlayerAvatar.player_id == player_id
                    )
                )

        return [
            {
                "avatar_id": item.avatar_id,
                "name": avatar.name,
                "tier": avatar.tier,
                "image_url": resolve_image_url(avatar.image_url, base_path),
                "price": item.price,
                "owned": item.avatar_id in owned,
            }
            for item, avatar in rows
        ]

    # ========================================================================
    # PRIVATE - Transaction Steps
    # ========================================================================

    async def _execute_purchase(
        self, player_id: str, avatar_id: str
    ) -> Tuple[int, int, int]:
        """
        Run the purchase steps in one transaction.

        Returns:
            (old_balance, new_balance, price)

        Raises:
            ItemNotAvailableError, AlreadyOwnedError, NotFoundError,
            InsufficientFundsError, TransientStorageError
        """
        source = self.get_config("shop.acquisition_source", SHOP_ACQUISITION_SOURCE)

        async with DatabaseService.get_transaction() as session:
            listing = await self._shop_repo.find_one_where(
                session,
                ShopItem.avatar_id == avatar_id,
                ShopItem.is_active.is_(True),
            )
            if listing is None:
                raise ItemNotAvailableError(avatar_id)
            price = int(listing.price)

            if await self._ownership_repo.exists(
                session,
                PlayerAvatar.player_id == player_id,
                PlayerAvatar.avatar_id == avatar_id,
            ):
                raise AlreadyOwnedError(player_id, avatar_id)

            player = await self._player_repo.get(session, player_id, for_update=True)
            if player is None:
                raise NotFoundError("Player", player_id)
            old_balance = int(player.coins)
            if old_balance < price:
                raise InsufficientFundsError(required=price, current=old_balance)

            new_balance = await self._debit(session, player, price)

            self._ownership_repo.add(
                session,
                PlayerAvatar(
                    player_id=player_id,
                    avatar_id=avatar_id,
                    acquired_via=source,
                    amount_paid=price,
                ),
            )
            try:
                await self._ownership_repo.flush(session)
            except IntegrityError as exc:
                if not violates_unique_constraint(
                    exc, PlayerAvatar.__table__, OWNERSHIP_UNIQUE_CONSTRAINT
                ):
                    raise
                raise AlreadyOwnedError(player_id, avatar_id) from exc

            self._audit_repo.add(
                session,
                TransactionLog(
                    player_id=player_id,
                    transaction_type=TransactionType.AVATAR_PURCHASE.value,
                    details={
                        "avatar_id": avatar_id,
                        "price": price,
                        "old_balance": old_balance,
                        "new_balance": new_balance,
                        "acquired_via": source,
                    },
                    context="shop.purchase",
                ),
            )

        return old_balance, new_balance, price

    async def _debit(self, session: AsyncSession, player: Player, price: int) -> int:
        """
        Conditional debit; the WHERE clause refuses to take the balance below zero.

        Raises:
            InsufficientFundsError: If no row matched (balance changed underneath)
        """
        result = await session.execute(
            update(Player)
            .where(Player.id == player.id, Player.coins >= price)
            .values(coins=Player.coins - price)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await session.refresh(player, ["coins"])
            raise InsufficientFundsError(required=price, current=int(player.coins))

        await session.refresh(player, ["coins"])
        return int(player.coins)
