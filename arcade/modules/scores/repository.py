"""
Score and game repositories.

Query helpers over the append-only ``scores`` table and the ``games``
catalog. Every method takes the caller's session; none of them commit.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from arcade.database.models import Game, Player, ScoreRecord
from arcade.modules.shared.base_repository import BaseRepository


class GameRepository(BaseRepository[Game]):
    """Repository for the games catalog."""

    async def list_all(self, session: AsyncSession) -> List[Game]:
        return await self.find_many_where(session, order_by=[Game.id.asc()])

    async def increment_plays(self, session: AsyncSession, game_id: str) -> None:
        """Atomic ``total_plays = total_plays + 1``."""
        await session.execute(
            update(Game)
            .where(Game.id == game_id)
            .values(total_plays=Game.total_plays + 1)
        )


class ScoreRepository(BaseRepository[ScoreRecord]):
    """Repository for score records."""

    async def values_for_player(
        self, session: AsyncSession, player_id: str, game_id: str
    ) -> List[float]:
        """Every value the player submitted for the game, oldest first."""
        stmt = (
            select(ScoreRecord.value)
            .where(
                ScoreRecord.player_id == player_id,
                ScoreRecord.game_id == game_id,
            )
            .order_by(ScoreRecord.id.asc())
        )
        result = await session.execute(stmt)
        values = list(result.scalars().all())

        self.log.debug(
            "Repository.values_for_player",
            extra={"player_id": player_id, "game_id": game_id, "count": len(values)},
        )
        return values

    async def best_by_player(
        self, session: AsyncSession, game_id: str, lower_is_better: bool
    ) -> Dict[str, float]:
        """``{player_id: best value}`` for one game, aggregated in SQL."""
        extremum = func.min if lower_is_better else func.max
        stmt = (
            select(ScoreRecord.player_id, extremum(ScoreRecord.value))
            .where(ScoreRecord.game_id == game_id)
            .group_by(ScoreRecord.player_id)
        )
        result = await session.execute(stmt)
        bests = {player_id: value for player_id, value in result.all()}

        self.log.debug(
            "Repository.best_by_player",
            extra={"game_id": game_id, "player_count": len(bests)},
        )
        return bests

    async def game_ids_for_player(
        self, session: AsyncSession, player_id: str
    ) -> List[str]:
        """Distinct game ids the player has scores in, ascending."""
        stmt = (
            select(ScoreRecord.game_id)
            .where(ScoreRecord.player_id == player_id)
            .distinct()
            .order_by(ScoreRecord.game_id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def entries_since(
        self,
        session: AsyncSession,
        game_id: str,
        since: datetime,
        lower_is_better: bool,
        limit: int,
    ) -> List[Tuple[ScoreRecord, str]]:
        """
        Scores for a game achieved at or after ``since``, best first, with
        the submitting player's display name. Equal values are ordered by
        ``achieved_at`` (earliest first).
        """
        value_order = ScoreRecord.value.asc() if lower_is_better else ScoreRecord.value.desc()
        stmt = (
            select(ScoreRecord, Player.display_name)
            .join(Player, Player.id == ScoreRecord.player_id)
            .where(
                ScoreRecord.game_id == game_id,
                ScoreRecord.achieved_at >= since,
            )
            .order_by(value_order, ScoreRecord.achieved_at.asc(), ScoreRecord.id.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        rows: List[Any] = list(result.all())
        return [(row[0], row[1]) for row in rows]
