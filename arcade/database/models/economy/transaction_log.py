"""
TransactionLog: economy audit log (immutable).
Pure schema only.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from arcade.core.database.base import Base, IdMixin, utc_now


class TransactionLog(Base, IdMixin):
    """
    Audit entry for a player action that moves coins or XP.

    Schema-only:
    - player_id
    - transaction_type
    - details (JSON)
    - context
    - timestamp
    """

    __tablename__ = "transaction_logs"
    __table_args__ = (
        Index("ix_transaction_logs_player_time", "player_id", "timestamp"),
        Index("ix_transaction_logs_type", "transaction_type"),
    )

    player_id: Mapped[str] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
    )

    transaction_type: Mapped[str] = mapped_column(String(50), nullable=False)

    details: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    context: Mapped[str] = mapped_column(Text, nullable=False)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        return (
            f"<TransactionLog(player_id={self.player_id!r}, "
            f"type={self.transaction_type!r})>"
        )
