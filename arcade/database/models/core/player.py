"""
Player Model
============

Identity, experience and coin balance for an arcade player.

Schema-only: level, tier and progress are derived from ``xp`` by the
progression formulas and are never stored.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from arcade.core.database.base import Base, TimestampMixin


class Player(Base, TimestampMixin):
    """
    Arcade player.

    Invariants enforced by the schema:
    - ``coins >= 0``
    - ``xp >= 0``
    """

    __tablename__ = "players"
    __table_args__ = (
        CheckConstraint("coins >= 0", name="coins_non_negative"),
        CheckConstraint("xp >= 0", name="xp_non_negative"),
    )

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        doc="Opaque player identifier",
    )

    display_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="Player",
    )

    xp: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        doc="Accumulated experience points (never decreases)",
    )

    coins: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        doc="Spendable coin balance",
    )

    equipped_avatar_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("avatars.id", ondelete="SET NULL"),
        nullable=True,
        default=None,
    )

    def __repr__(self) -> str:
        return f"<Player(id={self.id!r}, xp={self.xp}, coins={self.coins})>"
