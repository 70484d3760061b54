"""
Arcade Shared Module

Domain-level foundations for every feature module:

- BaseService: logging, config and event helpers for service classes
- BaseRepository: type-safe async query helpers
- Domain exceptions: business rule violations with stable error codes
- Formulas: pure progression and score comparison functions
- Constants: defaults for config-driven gameplay values

Usage
-----
    from arcade.modules.shared import (
        BaseService,
        InsufficientFundsError,
        level_from_xp,
    )
"""

from __future__ import annotations

from .base_repository import BaseRepository
from .base_service import BaseService
from .exceptions import (
    AlreadyClaimedError,
    AlreadyOwnedError,
    ArcadeDomainException,
    InsufficientFundsError,
    InsufficientResourcesError,
    InvalidOperationError,
    ItemNotAvailableError,
    NotFoundError,
    ValidationError,
)
from .formulas import (
    DEFAULT_TIERS,
    fold_best_score,
    is_better_score,
    level_from_xp,
    level_progress,
    progress_to_next_level,
    rank_among,
    tier_for_level,
    xp_required_for_level,
)

__all__ = [
    "BaseRepository",
    "BaseService",
    "AlreadyClaimedError",
    "AlreadyOwnedError",
    "ArcadeDomainException",
    "InsufficientFundsError",
    "InsufficientResourcesError",
    "InvalidOperationError",
    "ItemNotAvailableError",
    "NotFoundError",
    "ValidationError",
    "DEFAULT_TIERS",
    "fold_best_score",
    "is_better_score",
    "level_from_xp",
    "level_progress",
    "progress_to_next_level",
    "rank_among",
    "tier_for_level",
    "xp_required_for_level",
]
