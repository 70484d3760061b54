"""
Score Service
=============

Purpose
-------
Score store accessor for the Arcade engine: records scores, exposes the games
catalog, and answers best-score questions for the rank engine.

Domain
------
- Append score records (never update or delete them)
- Best score of one player for one game
- Best score of every player for one game
- Games a player has scores in

Best Score Rule
---------------
"Best" is derived from the game's ``lower_is_better`` flag through
``is_better_score``: a running best is replaced only by a strictly better
value. No records means no best (``None``), never zero.

Sessions
--------
Read methods accept an optional ``session`` so a caller that needs several
reads (the rank engine) can run them on one session. Without one, each call
opens its own short-lived read session.

Errors
------
- ``NotFoundError`` for unknown games/players
- ``TransientStorageError`` propagates from DatabaseService untouched; this
  service never retries
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from arcade.core.database.service import DatabaseService
from arcade.core.logging.logger import get_logger
from arcade.core.validation.input_validator import InputValidator
from arcade.database.models import Game, Player, ScoreRecord
from arcade.modules.scores.repository import GameRepository, ScoreRepository
from arcade.modules.shared.base_repository import BaseRepository
from arcade.modules.shared.base_service import BaseService
from arcade.modules.shared.constants import EVENT_SCORE_RECORDED
from arcade.modules.shared.exceptions import NotFoundError
from arcade.modules.shared.formulas import fold_best_score, is_better_score

if TYPE_CHECKING:
    from logging import Logger

    from arcade.core.config.manager import ConfigManager
    from arcade.core.event.bus import EventBus


class ScoreService(BaseService):
    """
    Service for score recording and best-score reads.

    Public Methods
    --------------
    - record_score() -> Append a score and report personal-best status
    - list_games() / get_game() -> Games catalog
    - best_score_for_player() -> Player's best for one game, or None
    - all_best_scores_for_game() -> {player_id: best}
    - games_with_scores() -> Game ids with at least one player score
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)

        self._game_repo = GameRepository(
            model_class=Game,
            logger=get_logger(f"{__name__}.GameRepository"),
        )
        self._score_repo = ScoreRepository(
            model_class=ScoreRecord,
            logger=get_logger(f"{__name__}.ScoreRepository"),
        )
        self._player_repo = BaseRepository(
            model_class=Player,
            logger=get_logger(f"{__name__}.PlayerRepository"),
        )

    @staticmethod
    @asynccontextmanager
    async def _session_scope(
        session: Optional[AsyncSession],
    ) -> AsyncIterator[AsyncSession]:
        if session is not None:
            yield session
            return
        async with DatabaseService.get_session() as own_session:
            yield own_session

    # ========================================================================
    # PUBLIC API - Games Catalog
    # ========================================================================

    async def list_games(self) -> List[Dict[str, Any]]:
        """All games ordered by id."""
        async with DatabaseService.get_session() as session:
            games = await self._game_repo.list_all(session)
            return [self._game_to_dict(game) for game in games]

    async def get_game(
        self, game_id: str, session: Optional[AsyncSession] = None
    ) -> Game:
        """
        Load a game.

        Raises:
            NotFoundError: If the game does not exist
        """
        async with self._session_scope(session) as active:
            game = await self._game_repo.get(active, game_id)
            if game is None:
                raise NotFoundError("Game", game_id)
            return game

    # ========================================================================
    # PUBLIC API - Best Scores
    # ========================================================================

    async def best_score_for_player(
        self,
        player_id: str,
        game_id: str,
        session: Optional[AsyncSession] = None,
    ) -> Optional[float]:
        """
        Player's best score for a game, or None when they have no records.

        Raises:
            NotFoundError: If the game does not exist
        """
        async with self._session_scope(session) as active:
            game = await self.get_game(game_id, session=active)
            values = await self._score_repo.values_for_player(active, player_id, game_id)
            return fold_best_score(values, game.lower_is_better)

    async def all_best_scores_for_game(
        self,
        game_id: str,
        session: Optional[AsyncSession] = None,
    ) -> Dict[str, float]:
        """
        Best score of every player with at least one record for the game.

        Raises:
            NotFoundError: If the game does not exist
        """
        async with self._session_scope(session) as active:
            game = await self.get_game(game_id, session=active)
            return await self._score_repo.best_by_player(
                active, game_id, game.lower_is_better
            )

    async def games_with_scores(
        self,
        player_id: str,
        session: Optional[AsyncSession] = None,
    ) -> List[str]:
        """Game ids the player has scores in, ascending."""
        async with self._session_scope(session) as active:
            return await self._score_repo.game_ids_for_player(active, player_id)

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def record_score(
        self, player_id: str, game_id: str, value: Any
    ) -> Dict[str, Any]:
        """
        Append a score record and count the play.

        Args:
            player_id: Submitting player
            game_id: Game the score belongs to
            value: Finite numeric score

        Returns:
            Dict with the stored record fields plus ``is_personal_best`` and
            ``previous_best``.

        Raises:
            ValidationError: If ids or value are malformed
            NotFoundError: If the player or game does not exist
        """
        player_id = InputValidator.validate_player_id(player_id)
        game_id = InputValidator.validate_game_id(game_id)
        value = InputValidator.validate_score_value(value)

        async with DatabaseService.get_transaction() as session:
            game = await self._game_repo.get(session, game_id)
            if game is None:
                raise NotFoundError("Game", game_id)

            if not await self._player_repo.exists(session, Player.id == player_id):
                raise NotFoundError("Player", player_id)

            previous = fold_best_score(
                await self._score_repo.values_for_player(session, player_id, game_id),
                game.lower_is_better,
            )

            record = self._score_repo.add(
                session,
                ScoreRecord(player_id=player_id, game_id=game_id, value=value),
            )
            await self._game_repo.increment_plays(session, game_id)
            await self._score_repo.flush(session)

            is_personal_best = previous is None or is_better_score(
                value, previous, game.lower_is_better
            )
            payload = {
                "id": record.id,
                "player_id": player_id,
                "game_id": game_id,
                "value": value,
                "achieved_at": record.achieved_at,
                "is_personal_best": is_personal_best,
                "previous_best": previous,
            }

        self.log_operation(
            "record_score",
            player_id=player_id,
            game_id=game_id,
            value=value,
            is_personal_best=is_personal_best,
        )
        await self.emit_event(EVENT_SCORE_RECORDED, payload)
        return payload

    # ========================================================================
    # PRIVATE HELPERS
    # ========================================================================

    @staticmethod
    def _game_to_dict(game: Game) -> Dict[str, Any]:
        return {
            "id": game.id,
            "name": game.name,
            "lower_is_better": game.lower_is_better,
            "total_plays": game.total_plays,
        }
