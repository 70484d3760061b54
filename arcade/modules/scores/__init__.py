from arcade.modules.scores.repository import GameRepository, ScoreRepository
from arcade.modules.scores.service import ScoreService

__all__ = ["GameRepository", "ScoreRepository", "ScoreService"]
