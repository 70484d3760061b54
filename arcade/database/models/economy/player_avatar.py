"""
PlayerAvatar Model
==================

Ownership record. The unique constraint on (player_id, avatar_id) is what
makes duplicate grants impossible under concurrent purchases.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from arcade.core.database.base import Base, IdMixin, utc_now
from ..enums import AcquisitionSource

OWNERSHIP_UNIQUE_CONSTRAINT = "uq_player_avatars_player_avatar"


class PlayerAvatar(Base, IdMixin):
    __tablename__ = "player_avatars"
    __table_args__ = (
        UniqueConstraint("player_id", "avatar_id", name=OWNERSHIP_UNIQUE_CONSTRAINT),
    )

    player_id: Mapped[str] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    avatar_id: Mapped[str] = mapped_column(
        ForeignKey("avatars.id", ondelete="CASCADE"),
        nullable=False,
    )

    acquired_via: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=AcquisitionSource.SHOP.value,
    )

    amount_paid: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    acquired_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        return (
            f"<PlayerAvatar(player_id={self.player_id!r}, "
            f"avatar_id={self.avatar_id!r}, acquired_via={self.acquired_via!r})>"
        )
