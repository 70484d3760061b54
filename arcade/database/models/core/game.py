"""
Game Model
==========

Catalog entry for a playable game. ``lower_is_better`` selects the score
direction used by every best-score and rank computation for the game.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from arcade.core.database.base import Base, TimestampMixin


class Game(Base, TimestampMixin):
    __tablename__ = "games"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    lower_is_better: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        doc="True for time/strokes style games where smaller values win",
    )

    total_plays: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    def __repr__(self) -> str:
        return f"<Game(id={self.id!r}, lower_is_better={self.lower_is_better})>"
