"""
Daily Challenge Models
======================

- ``DailyChallenge``: one goal scheduled for a UTC day ("reach 500 in
  neon_tap three times")
- ``ChallengeProgress``: a player's qualifying runs toward one challenge and
  whether its reward was taken
- ``DailyBonusClaim``: the once-per-day XP bonus for clearing every challenge

The unique constraints are what make double claims impossible when two
requests race.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from arcade.core.database.base import Base, IdMixin, TimestampMixin, utc_now

PROGRESS_UNIQUE_CONSTRAINT = "uq_challenge_progress_player_challenge"
DAILY_BONUS_UNIQUE_CONSTRAINT = "uq_daily_bonus_claims_player_day"


class DailyChallenge(Base, TimestampMixin):
    __tablename__ = "daily_challenges"
    __table_args__ = (
        CheckConstraint("target_plays >= 1", name="target_plays_positive"),
        CheckConstraint("reward_coins >= 0", name="reward_coins_non_negative"),
        Index("ix_daily_challenges_active_date", "active_date", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    title: Mapped[str] = mapped_column(String(100), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    active_date: Mapped[date] = mapped_column(Date, nullable=False)

    target_game_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("games.id", ondelete="CASCADE"),
        nullable=True,
        default=None,
        doc="None means a run in any game counts",
    )

    target_score: Mapped[float] = mapped_column(Float, nullable=False)

    target_plays: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    reward_coins: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<DailyChallenge(id={self.id!r}, active_date={self.active_date}, "
            f"target_game_id={self.target_game_id!r})>"
        )


class ChallengeProgress(Base, IdMixin):
    __tablename__ = "challenge_progress"
    __table_args__ = (
        UniqueConstraint("player_id", "challenge_id", name=PROGRESS_UNIQUE_CONSTRAINT),
        CheckConstraint("current_progress >= 0", name="progress_non_negative"),
    )

    player_id: Mapped[str] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    challenge_id: Mapped[str] = mapped_column(
        ForeignKey("daily_challenges.id", ondelete="CASCADE"),
        nullable=False,
    )

    current_progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_claimed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    claimed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    def __repr__(self) -> str:
        return (
            f"<ChallengeProgress(player_id={self.player_id!r}, "
            f"challenge_id={self.challenge_id!r}, progress={self.current_progress}, "
            f"claimed={self.is_claimed})>"
        )


class DailyBonusClaim(Base, IdMixin):
    __tablename__ = "daily_bonus_claims"
    __table_args__ = (
        UniqueConstraint("player_id", "bonus_date", name=DAILY_BONUS_UNIQUE_CONSTRAINT),
    )

    player_id: Mapped[str] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
    )

    bonus_date: Mapped[date] = mapped_column(Date, nullable=False)

    xp_awarded: Mapped[int] = mapped_column(BigInteger, nullable=False)

    claimed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
