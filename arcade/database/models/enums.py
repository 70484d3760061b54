"""
Database Model Enums
====================

Type-safe constants for categorical columns. Columns store the string value;
services compare against these members.
"""

from __future__ import annotations

import enum


class AcquisitionSource(str, enum.Enum):
    """How a player came to own an avatar."""

    SHOP = "shop"
    GRANT = "grant"
    STARTER = "starter"


class TransactionType(str, enum.Enum):
    """Categories of economy audit entries."""

    AVATAR_PURCHASE = "avatar_purchase"
    CHALLENGE_REWARD = "challenge_reward"
    DAILY_XP_BONUS = "daily_xp_bonus"
