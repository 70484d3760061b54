from arcade.modules.profile.service import (
    CareerStats,
    ProfileService,
    PublicProfile,
    TopGame,
)

__all__ = ["CareerStats", "ProfileService", "PublicProfile", "TopGame"]
