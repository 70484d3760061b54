"""
Database Models Package
========================

SQLAlchemy ORM models for the Arcade engine, grouped by domain:

- core: Player, Game, Avatar
- progression: ScoreRecord (append-only score history), DailyChallenge,
  ChallengeProgress, DailyBonusClaim
- economy: ShopItem, PlayerAvatar, TransactionLog
- enums: shared categorical constants

Importing this package registers every table on ``Base.metadata``.
"""

from arcade.core.database.base import Base

from .core import Avatar, Game, Player
from .economy import PlayerAvatar, ShopItem, TransactionLog
from .enums import AcquisitionSource, TransactionType
from .progression import (
    ChallengeProgress,
    DailyBonusClaim,
    DailyChallenge,
    ScoreRecord,
)

__all__ = [
    "Base",
    "Avatar",
    "Game",
    "Player",
    "PlayerAvatar",
    "ShopItem",
    "TransactionLog",
    "ScoreRecord",
    "DailyChallenge",
    "ChallengeProgress",
    "DailyBonusClaim",
    "AcquisitionSource",
    "TransactionType",
]
