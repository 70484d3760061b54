"""
Arcade Formulas

Purpose
-------
Pure calculation functions for progression and ranking: the XP/level curve,
progress toward the next level, tier names, and the single score comparison
rule every leaderboard computation goes through.

Design Notes
------------
- Pure functions only (no side effects, no config access, no I/O)
- Integer square roots keep level boundaries exact, so
  ``level_from_xp(xp_required_for_level(L)) == L`` holds for every L >= 1
- Callers pass tunables (tier thresholds) explicitly

Usage
-----
    from arcade.modules.shared.formulas import level_from_xp, is_better_score

    level = level_from_xp(player.xp)
    if is_better_score(new_value, best, game.lower_is_better):
        ...
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

# (minimum level, tier name), highest first
DEFAULT_TIERS: Tuple[Tuple[int, str], ...] = (
    (30, "Legend"),
    (20, "Hacker"),
    (10, "Cyberpunk"),
    (1, "Rookie"),
)


# ============================================================================
# Progression
# ============================================================================


def level_from_xp(xp: int) -> int:
    """
    Level reached with ``xp`` experience: ``floor(0.1 * sqrt(xp)) + 1``.

    Negative input is treated as 0.

    Example:
        >>> level_from_xp(0)
        1
        >>> level_from_xp(100)
        2
        >>> level_from_xp(399)
        2
        >>> level_from_xp(400)
        3
    """
    xp = max(int(xp), 0)
    # floor(sqrt(xp) / 10) == isqrt(xp) // 10 for integer xp
    return math.isqrt(xp) // 10 + 1


def xp_required_for_level(level: int) -> int:
    """
    Total XP at which ``level`` starts: ``(10 * (level - 1)) ** 2``.

    Example:
        >>> xp_required_for_level(1)
        0
        >>> xp_required_for_level(2)
        100
        >>> xp_required_for_level(10)
        8100
    """
    if level <= 1:
        return 0
    return (10 * (level - 1)) ** 2


def progress_to_next_level(xp: int) -> float:
    """
    Percentage of the way from the current level to the next, in [0, 100].

    Example:
        >>> progress_to_next_level(0)
        0.0
        >>> progress_to_next_level(250)
        50.0
    """
    xp = max(int(xp), 0)
    level = level_from_xp(xp)
    lo = xp_required_for_level(level)
    hi = xp_required_for_level(level + 1)

    if hi <= lo:
        return 100.0

    progress = 100.0 * (xp - lo) / (hi - lo)
    return min(max(progress, 0.0), 100.0)


def tier_for_level(
    level: int, tiers: Sequence[Tuple[int, str]] = DEFAULT_TIERS
) -> str:
    """
    Tier name for a level, given ``(min_level, name)`` pairs.

    Example:
        >>> tier_for_level(9)
        'Rookie'
        >>> tier_for_level(10)
        'Cyberpunk'
        >>> tier_for_level(42)
        'Legend'
    """
    for min_level, name in sorted(tiers, key=lambda item: item[0], reverse=True):
        if level >= min_level:
            return name
    return sorted(tiers, key=lambda item: item[0])[0][1]


def level_progress(
    xp: int, tiers: Sequence[Tuple[int, str]] = DEFAULT_TIERS
) -> Dict[str, Any]:
    """
    Everything a profile card needs about a player's level.

    Returns:
        Dict with xp, level, tier, current_level_xp, next_level_xp,
        xp_to_next_level and progress_percent.
    """
    xp = max(int(xp), 0)
    level = level_from_xp(xp)
    current_level_xp = xp_required_for_level(level)
    next_level_xp = xp_required_for_level(level + 1)

    return {
        "xp": xp,
        "level": level,
        "tier": tier_for_level(level, tiers),
        "current_level_xp": current_level_xp,
        "next_level_xp": next_level_xp,
        "xp_to_next_level": next_level_xp - xp,
        "progress_percent": progress_to_next_level(xp),
    }


# ============================================================================
# Score comparison
# ============================================================================


def is_better_score(candidate: float, incumbent: float, lower_is_better: bool) -> bool:
    """
    True only if ``candidate`` is strictly better than ``incumbent``.

    Example:
        >>> is_better_score(10, 12, lower_is_better=True)
        True
        >>> is_better_score(12, 12, lower_is_better=False)
        False
    """
    if lower_is_better:
        return candidate < incumbent
    return candidate > incumbent


def fold_best_score(values: Iterable[float], lower_is_better: bool) -> Optional[float]:
    """
    Best value of ``values``; the running best is replaced only by a strictly
    better value. Returns None for an empty iterable.

    Example:
        >>> fold_best_score([], lower_is_better=False) is None
        True
        >>> fold_best_score([3, 9, 4], lower_is_better=False)
        9
    """
    best: Optional[float] = None
    for value in values:
        if best is None or is_better_score(value, best, lower_is_better):
            best = value
    return best


def rank_among(
    score: float, other_scores: Iterable[float], lower_is_better: bool
) -> int:
    """
    ``1 + count of other_scores strictly better than score``.

    Tied scores share a rank; each strictly better score consumes a slot.

    Example:
        >>> rank_among(100, [100, 50], lower_is_better=False)
        1
        >>> rank_among(50, [100, 100], lower_is_better=False)
        3
    """
    better = sum(1 for other in other_scores if is_better_score(other, score, lower_is_better))
    return better + 1
