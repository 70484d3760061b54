"""
Arcade: leaderboard and progression engine for a casual-game arcade.

Subpackages
-----------
- ``arcade.core``: configuration, logging, database, events, caching, validation
- ``arcade.database``: ORM models
- ``arcade.modules``: domain services (scores, leaderboard, profile, shop, avatar)
"""

__version__ = "0.1.0"
