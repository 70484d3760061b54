"""
ShopItem Model
==============

Shop listing for an avatar. An avatar is purchasable only while its listing
exists and ``is_active`` is true.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, CheckConstraint, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from arcade.core.database.base import Base, TimestampMixin


class ShopItem(Base, TimestampMixin):
    __tablename__ = "shop_items"
    __table_args__ = (CheckConstraint("price >= 0", name="price_non_negative"),)

    avatar_id: Mapped[str] = mapped_column(
        ForeignKey("avatars.id", ondelete="CASCADE"),
        primary_key=True,
    )

    price: Mapped[int] = mapped_column(BigInteger, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return (
            f"<ShopItem(avatar_id={self.avatar_id!r}, price={self.price}, "
            f"is_active={self.is_active})>"
        )
