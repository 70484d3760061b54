"""Progression models: score history and daily challenges."""

from .challenge import ChallengeProgress, DailyBonusClaim, DailyChallenge
from .score import ScoreRecord

__all__ = ["ChallengeProgress", "DailyBonusClaim", "DailyChallenge", "ScoreRecord"]
