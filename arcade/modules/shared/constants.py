"""
Arcade Domain Constants

Default values for gameplay tunables. Each one is the fallback used when the
matching ConfigManager key is absent from ``config/*.yaml``.

Infrastructure settings (pool sizes, timeouts, log levels) live on
``arcade.core.config.Config`` instead.
"""

from __future__ import annotations

from typing import Final

# ============================================================================
# PROFILE
# ============================================================================

DEFAULT_TOP_GAMES_LIMIT: Final[int] = 3  # profile.top_games_limit
TOP_RANK: Final[int] = 1
TOP_FIVE_RANK: Final[int] = 5

# ============================================================================
# LEADERBOARD
# ============================================================================

DEFAULT_DAILY_LEADERBOARD_LIMIT: Final[int] = 20  # leaderboard.daily_limit
MAX_LEADERBOARD_LIMIT: Final[int] = 100  # leaderboard.max_limit

# ============================================================================
# SHOP & AVATARS
# ============================================================================

SHOP_ACQUISITION_SOURCE: Final[str] = "shop"  # shop.acquisition_source
DEFAULT_AVATAR_BASE_PATH: Final[str] = "/avatars/"  # avatars.image_base_path
NO_AVATAR: Final[str] = "none"

# ============================================================================
# DAILY CHALLENGES
# ============================================================================

DEFAULT_DAILY_CHALLENGE_COUNT: Final[int] = 3  # challenges.daily_count
DEFAULT_DAILY_XP_BONUS: Final[int] = 500  # challenges.daily_xp_bonus

# ============================================================================
# EVENTS
# ============================================================================

EVENT_SCORE_RECORDED: Final[str] = "score.recorded"
EVENT_AVATAR_PURCHASED: Final[str] = "shop.avatar_purchased"
EVENT_AVATAR_EQUIPPED: Final[str] = "avatar.equipped"
EVENT_CHALLENGE_PROGRESSED: Final[str] = "challenges.progressed"
EVENT_CHALLENGE_REWARD_CLAIMED: Final[str] = "challenges.reward_claimed"
EVENT_DAILY_BONUS_CLAIMED: Final[str] = "challenges.daily_bonus_claimed"
