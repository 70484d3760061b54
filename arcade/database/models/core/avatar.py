"""
Avatar Model
============

Cosmetic avatar definition. Shop pricing lives on ``ShopItem``; ownership
lives on ``PlayerAvatar``.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from arcade.core.database.base import Base, TimestampMixin


class Avatar(Base, TimestampMixin):
    __tablename__ = "avatars"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    tier: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="Rookie",
        doc="Progression tier the avatar belongs to",
    )

    image_url: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Absolute URL, rooted path, or file name under the avatar base path",
    )

    def __repr__(self) -> str:
        return f"<Avatar(id={self.id!r}, tier={self.tier!r})>"
