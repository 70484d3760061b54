"""Core catalog and identity models."""

from .avatar import Avatar
from .game import Game
from .player import Player

__all__ = ["Avatar", "Game", "Player"]
