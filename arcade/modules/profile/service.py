"""
Profile Service
===============

Purpose
-------
Build a player's public profile: identity, level card, top games by rank
and career ranking totals.

Aggregation
-----------
1. Load the player (missing player -> ``None``, nothing partial)
2. List every game the player has scored in (ascending game id)
3. Run ``rank_of`` for all of them concurrently and wait for all to finish
4. Drop games whose rank failed with ``TransientStorageError`` or
   ``NotFoundError`` (logged at WARNING); any other failure propagates
5. Stable-sort the remaining results by rank, keep the first
   ``profile.top_games_limit`` (default 3) as top games
6. ``total_rank_1`` / ``total_rank_le_5`` count over every computed game

Cancelling ``public_profile`` cancels every in-flight rank computation.
"""

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

from arcade.core.database.service import DatabaseService
from arcade.core.exceptions import TransientStorageError
from arcade.core.logging.logger import LogContext, get_logger
from arcade.core.validation.input_validator import InputValidator
from arcade.database.models import Game, Player
from arcade.modules.shared.base_repository import BaseRepository
from arcade.modules.shared.base_service import BaseService
from arcade.modules.shared.constants import (
    DEFAULT_TOP_GAMES_LIMIT,
    TOP_FIVE_RANK,
    TOP_RANK,
)
from arcade.modules.shared.exceptions import NotFoundError
from arcade.modules.shared.formulas import DEFAULT_TIERS, level_progress

if TYPE_CHECKING:
    from logging import Logger

    from arcade.core.cache.avatar_image_cache import AvatarImageCache
    from arcade.core.config.manager import ConfigManager
    from arcade.core.event.bus import EventBus
    from arcade.modules.leaderboard.service import LeaderboardService, RankResult
    from arcade.modules.scores.service import ScoreService

# Failures that only cost the profile one game
_DROPPABLE_ERRORS = (TransientStorageError, NotFoundError)


@dataclass(frozen=True)
class TopGame:
    game_id: str
    game_name: str
    rank: int
    score: float


@dataclass(frozen=True)
class CareerStats:
    total_rank_1: int = 0
    total_rank_le_5: int = 0


@dataclass(frozen=True)
class PublicProfile:
    """Public view of a player. ``player`` holds identity and level data."""

    player: Dict[str, Any]
    top_games: List[TopGame] = field(default_factory=list)
    career_stats: CareerStats = field(default_factory=CareerStats)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ProfileService(BaseService):
    """
    Service for public profile aggregation.

    Public Methods
    --------------
    - public_profile() -> PublicProfile or None
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        score_service: ScoreService,
        leaderboard_service: LeaderboardService,
        avatar_cache: Optional[AvatarImageCache] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._scores = score_service
        self._ranks = leaderboard_service
        self._avatar_cache = avatar_cache

        self._player_repo = BaseRepository(
            model_class=Player,
            logger=get_logger(f"{__name__}.PlayerRepository"),
        )
        self._game_repo = BaseRepository(
            model_class=Game,
            logger=get_logger(f"{__name__}.GameRepository"),
        )

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    async def public_profile(self, player_id: str) -> Optional[PublicProfile]:
        """
        Aggregate a player's public profile.

        Returns:
            PublicProfile, or None if the player does not exist

        Raises:
            ValidationError: If player_id is malformed
            TransientStorageError: If the player or their game list cannot
                be read
        """
        player_id = InputValidator.validate_player_id(player_id)

        async with LogContext(player_id=player_id, component="profile", operation="public_profile"):
            async with DatabaseService.get_session() as session:
                player = await self._player_repo.get(session, player_id)
                if player is None:
                    self.log.info("Profile requested for unknown player")
                    return None

                game_ids = await self._scores.games_with_scores(player_id, session=session)
                game_names = await self._load_game_names(session, game_ids)

            ranked = await self._rank_all(player_id, game_ids)

            limit = self.get_int_config(
                "profile.top_games_limit", DEFAULT_TOP_GAMES_LIMIT, minimum=0
            )
            ordered = sorted(ranked, key=lambda item: item[1].rank)
            top_games = [
                TopGame(
                    game_id=game_id,
                    game_name=game_names.get(game_id, game_id),
                    rank=result.rank,
                    score=result.score,
                )
                for game_id, result in ordered[:limit]
            ]
            stats = CareerStats(
                total_rank_1=sum(1 for _, r in ranked if r.rank == TOP_RANK),
                total_rank_le_5=sum(1 for _, r in ranked if r.rank <= TOP_FIVE_RANK),
            )

            self.log_operation(
                "public_profile",
                player_id=player_id,
                games_scored=len(game_ids),
                games_ranked=len(ranked),
                total_rank_1=stats.total_rank_1,
            )

            return PublicProfile(
                player=self._player_section(player),
                top_games=top_games,
                career_stats=stats,
            )

    # ========================================================================
    # PRIVATE HELPERS
    # ========================================================================

    async def _rank_all(
        self, player_id: str, game_ids: Sequence[str]
    ) -> List[Tuple[str, RankResult]]:
        """
        Rank the player in every game concurrently.

        Results keep the order of ``game_ids``.
        """
        if not game_ids:
            return []

        results = await asyncio.gather(
            *(self._ranks.rank_of(player_id, game_id) for game_id in game_ids),
            return_exceptions=True,
        )

        ranked: List[Tuple[str, RankResult]] = []
        for game_id, result in zip(game_ids, results):
            if isinstance(result, _DROPPABLE_ERRORS):
                self.log.warning(
                    "Dropping game from profile after rank failure",
                    extra={
                        "player_id": player_id,
                        "game_id": game_id,
                        "error_type": type(result).__name__,
                        "error": str(result),
                    },
                )
                continue
            if isinstance(result, BaseException):
                raise result
            if result is None:
                continue
            ranked.append((game_id, result))
        return ranked

    async def _load_game_names(self, session, game_ids: Sequence[str]) -> Dict[str, str]:
        if not game_ids:
            return {}
        games = await self._game_repo.find_many_where(session, Game.id.in_(list(game_ids)))
        return {game.id: game.name for game in games}

    def _tiers(self) -> List[Tuple[int, str]]:
        configured = self.get_config("progression.tiers")
        if not configured:
            return list(DEFAULT_TIERS)
        return [(int(item["min_level"]), str(item["name"])) for item in configured]

    def _player_section(self, player: Player) -> Dict[str, Any]:
        avatar_url = None
        if self._avatar_cache is not None:
            avatar_url = self._avatar_cache.get(player.equipped_avatar_id)

        return {
            "id": player.id,
            "display_name": player.display_name,
            "equipped_avatar_id": player.equipped_avatar_id,
            "avatar_url": avatar_url,
            **level_progress(player.xp, self._tiers()),
        }
