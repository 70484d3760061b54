"""
Leaderboard Service
===================

Purpose
-------
Rank engine for the Arcade: a player's global standing per game, plus the
daily top list shown after each run.

Ranking Rule
------------
``rank = 1 + number of OTHER players whose best score is strictly better``.

- The queried player is never compared against themselves
- Tied players share a rank; the next distinct score counts every strictly
  better player (bests 100, 100, 50 rank 1, 1, 3)
- A player without scores for the game has no rank (``None``)

Every rank computation opens one read session and performs all its reads on
it, so concurrent ``rank_of`` calls never share a session.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from arcade.core.database.service import DatabaseService
from arcade.core.logging.logger import get_logger
from arcade.core.validation.input_validator import InputValidator
from arcade.database.models import ScoreRecord
from arcade.modules.scores.repository import ScoreRepository
from arcade.modules.shared.base_service import BaseService
from arcade.modules.shared.constants import (
    DEFAULT_DAILY_LEADERBOARD_LIMIT,
    MAX_LEADERBOARD_LIMIT,
)
from arcade.modules.shared.formulas import rank_among

if TYPE_CHECKING:
    from logging import Logger

    from arcade.core.config.manager import ConfigManager
    from arcade.core.event.bus import EventBus
    from arcade.modules.scores.service import ScoreService


@dataclass(frozen=True)
class RankResult:
    """A player's rank in one game and the best score it is based on."""

    rank: int
    score: float


def utc_midnight(now: Optional[datetime] = None) -> datetime:
    """Start of the current UTC day."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


class LeaderboardService(BaseService):
    """
    Service for per-game rankings.

    Public Methods
    --------------
    - rank_of() -> Player's rank and best score for one game
    - get_daily_leaderboard() -> Today's best runs for a game
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        score_service: ScoreService,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._scores = score_service
        self._score_repo = ScoreRepository(
            model_class=ScoreRecord,
            logger=get_logger(f"{__name__}.ScoreRepository"),
        )

    # ========================================================================
    # PUBLIC API - Rank Engine
    # ========================================================================

    async def rank_of(self, player_id: str, game_id: str) -> Optional[RankResult]:
        """
        Compute a player's global rank for a game.

        This is a **read-only** operation using get_session().

        Returns:
            RankResult, or None when the player has no score for the game

        Raises:
            NotFoundError: If the game does not exist
            TransientStorageError: If the store fails mid-computation

        Example:
            >>> result = await service.rank_of("p1", "neon_tap")
            >>> result.rank, result.score
            (1, 4210.0)
        """
        async with DatabaseService.get_session() as session:
            best = await self._scores.best_score_for_player(
                player_id, game_id, session=session
            )
            if best is None:
                return None

            game = await self._scores.get_game(game_id, session=session)
            bests = await self._scores.all_best_scores_for_game(game_id, session=session)

        others = [value for other_id, value in bests.items() if other_id != player_id]
        rank = rank_among(best, others, game.lower_is_better)

        self.log.debug(
            "Rank computed",
            extra={
                "player_id": player_id,
                "game_id": game_id,
                "rank": rank,
                "score": best,
                "field_size": len(others) + 1,
            },
        )
        return RankResult(rank=rank, score=best)

    # ========================================================================
    # PUBLIC API - Daily Leaderboard
    # ========================================================================

    async def get_daily_leaderboard(
        self,
        game_id: str,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        Best runs of the current UTC day for a game.

        Every run is listed separately (a player may appear more than once).
        Ordered best first; equal values keep the earlier run first.

        Args:
            game_id: Game to list
            limit: Maximum entries (default ``leaderboard.daily_limit``)
            now: Reference time, for tests

        Returns:
            List of ``{position, player_id, display_name, score, achieved_at}``

        Raises:
            ValidationError: If limit is out of range
            NotFoundError: If the game does not exist
        """
        game_id = InputValidator.validate_game_id(game_id)
        max_limit = self.get_int_config(
            "leaderboard.max_limit", MAX_LEADERBOARD_LIMIT, minimum=1
        )
        if limit is None:
            limit = self.get_int_config(
                "leaderboard.daily_limit", DEFAULT_DAILY_LEADERBOARD_LIMIT, minimum=1
            )
        limit = InputValidator.validate_positive_integer(
            limit, field_name="limit", max_value=max_limit
        )
        since = utc_midnight(now)

        self.log_operation("get_daily_leaderboard", game_id=game_id, limit=limit)

        async with DatabaseService.get_session() as session:
            game = await self._scores.get_game(game_id, session=session)
            rows = await self._score_repo.entries_since(
                session, game_id, since, game.lower_is_better, limit
            )

        return [
            {
                "position": position,
                "player_id": record.player_id,
                "display_name": display_name,
                "score": record.value,
                "achieved_at": record.achieved_at,
            }
            for position, (record, display_name) in enumerate(rows, start=1)
        ]
