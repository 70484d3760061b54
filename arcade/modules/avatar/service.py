"""
Avatar Service
==============

Purpose
-------
Avatar inventory: what a player owns, which avatar is equipped, and where
each avatar's image lives.

Image URLs
----------
URLs come from an ``AvatarImageCache`` loaded from the ``avatars`` table by
``load_image_urls()``. Stored references that already start with ``http`` or
``/`` are used as-is; bare file names are placed under
``avatars.image_base_path`` (default ``/avatars/``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import select

from arcade.core.cache.avatar_image_cache import AvatarImageCache, resolve_image_url
from arcade.core.database.service import DatabaseService
from arcade.core.logging.logger import get_logger
from arcade.core.validation.input_validator import InputValidator
from arcade.database.models import Avatar, Player, PlayerAvatar
from arcade.modules.shared.base_repository import BaseRepository
from arcade.modules.shared.base_service import BaseService
from arcade.modules.shared.constants import (
    DEFAULT_AVATAR_BASE_PATH,
    EVENT_AVATAR_EQUIPPED,
    NO_AVATAR,
)
from arcade.modules.shared.exceptions import InvalidOperationError, NotFoundError

if TYPE_CHECKING:
    from logging import Logger

    from arcade.core.config.manager import ConfigManager
    from arcade.core.event.bus import EventBus


class AvatarService(BaseService):
    """
    Service for avatar ownership and equipping.

    Public Methods
    --------------
    - get_owned_avatars() -> Avatars a player owns
    - equip_avatar() -> Equip an owned avatar, or clear with None/"none"
    - get_equipped_avatar() -> Currently equipped avatar, or None
    - get_avatar_image_url() -> Resolved image URL for an avatar id
    - load_image_urls() -> Loader used by the image cache
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        image_cache: Optional[AvatarImageCache] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self.image_cache = image_cache or AvatarImageCache(self.load_image_urls)

        self._player_repo = BaseRepository(Player, get_logger(f"{__name__}.PlayerRepository"))
        self._ownership_repo = BaseRepository(
            PlayerAvatar, get_logger(f"{__name__}.PlayerAvatarRepository")
        )

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_owned_avatars(self, player_id: str) -> List[Dict[str, Any]]:
        """
        Every avatar the player owns, oldest acquisition first.

        Raises:
            NotFoundError: If the player does not exist
        """
        player_id = InputValidator.validate_player_id(player_id)
        base_path = self._base_path()

        async with DatabaseService.get_session() as session:
            player = await self._player_repo.get(session, player_id)
            if player is None:
                raise NotFoundError("Player", player_id)

            stmt = (
                select(PlayerAvatar, Avatar)
                .join(Avatar, Avatar.id == PlayerAvatar.avatar_id)
                .where(PlayerAvatar.player_id == player_id)
                .order_by(PlayerAvatar.acquired_at.asc(), PlayerAvatar.id.asc())
            )
            rows = (await session.execute(stmt)).all()

        return [
            {
                "avatar_id": avatar.id,
                "name": avatar.name,
                "tier": avatar.tier,
                "image_url": resolve_image_url(avatar.image_url, base_path),
                "acquired_via": ownership.acquired_via,
                "amount_paid": ownership.amount_paid,
                "acquired_at": ownership.acquired_at,
                "equipped": avatar.id == player.equipped_avatar_id,
            }
            for ownership, avatar in rows
        ]

    async def get_equipped_avatar(self, player_id: str) -> Optional[Dict[str, Any]]:
        """
        The player's equipped avatar, or None when nothing is equipped.

        Raises:
            NotFoundError: If the player does not exist
        """
        player_id = InputValidator.validate_player_id(player_id)

        async with DatabaseService.get_session() as session:
            player = await self._player_repo.get(session, player_id)
            if player is None:
                raise NotFoundError("Player", player_id)
            if player.equipped_avatar_id is None:
                return None

            avatar = await session.get(Avatar, player.equipped_avatar_id)

        if avatar is None:
            return None
        return {
            "avatar_id": avatar.id,
            "name": avatar.name,
            "tier": avatar.tier,
            "image_url": resolve_image_url(avatar.image_url, self._base_path()),
        }

    async def get_avatar_image_url(self, avatar_id: Optional[str]) -> Optional[str]:
        """
        Resolved image URL for an avatar id, warming the cache on first use.

        Returns None for ``None``, ``""``, ``"none"`` and unknown ids.
        """
        if avatar_id is None or avatar_id.strip().lower() in ("", NO_AVATAR):
            return None
        if not self.image_cache.is_loaded:
            await self.image_cache.warm()
        return self.image_cache.get(avatar_id)

    async def load_image_urls(self) -> Dict[str, Optional[str]]:
        """``{avatar_id: resolved image URL}`` for every avatar."""
        base_path = self._base_path()
        async with DatabaseService.get_session() as session:
            result = await session.execute(select(Avatar.id, Avatar.image_url))
            rows = result.all()
        return {avatar_id: resolve_image_url(raw, base_path) for avatar_id, raw in rows}

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def equip_avatar(
        self, player_id: str, avatar_id: Optional[str]
    ) -> Dict[str, Any]:
        """
        Equip an owned avatar, or unequip with ``None`` / ``"none"``.

        This is a **write operation** using get_transaction() with pessimistic
        locking on the player row.

        Raises:
            NotFoundError: If the player does not exist
            InvalidOperationError: If the player does not own the avatar
        """
        player_id = InputValidator.validate_player_id(player_id)
        if avatar_id is not None and avatar_id.strip().lower() in ("", NO_AVATAR):
            avatar_id = None
        if avatar_id is not None:
            avatar_id = InputValidator.validate_avatar_id(avatar_id)

        async with DatabaseService.get_transaction() as session:
            player = await self._player_repo.get(session, player_id, for_update=True)
            if player is None:
                raise NotFoundError("Player", player_id)

            if avatar_id is not None and not await self._ownership_repo.exists(
                session,
                PlayerAvatar.player_id == player_id,
                PlayerAvatar.avatar_id == avatar_id,
            ):
                raise InvalidOperationError("equip_avatar", "Avatar is not owned")

            previous = player.equipped_avatar_id
            player.equipped_avatar_id = avatar_id

        self.log_operation(
            "equip_avatar",
            player_id=player_id,
            avatar_id=avatar_id,
            previous_avatar_id=previous,
        )
        await self.emit_event(
            EVENT_AVATAR_EQUIPPED,
            {
                "player_id": player_id,
                "avatar_id": avatar_id,
                "previous_avatar_id": previous,
            },
        )
        return {
            "player_id": player_id,
            "equipped_avatar_id": avatar_id,
            "image_url": await self.get_avatar_image_url(avatar_id),
        }

    # ========================================================================
    # PRIVATE HELPERS
    # ========================================================================

    def _base_path(self) -> str:
        return self.get_config("avatars.image_base_path", DEFAULT_AVATAR_BASE_PATH)
