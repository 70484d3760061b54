"""
ScoreRecord Model
=================

Append-only log of submitted scores. Best scores and ranks are derived from
these rows at read time; nothing here is ever updated in place.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from arcade.core.database.base import Base, IdMixin, utc_now


class ScoreRecord(Base, IdMixin):
    __tablename__ = "scores"
    __table_args__ = (
        Index("ix_scores_game_player", "game_id", "player_id"),
        Index("ix_scores_player_game", "player_id", "game_id"),
        Index("ix_scores_game_achieved", "game_id", "achieved_at"),
    )

    player_id: Mapped[str] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
    )

    game_id: Mapped[str] = mapped_column(
        ForeignKey("games.id", ondelete="CASCADE"),
        nullable=False,
    )

    value: Mapped[float] = mapped_column(Float, nullable=False)

    achieved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        return (
            f"<ScoreRecord(player_id={self.player_id!r}, "
            f"game_id={self.game_id!r}, value={self.value})>"
        )
