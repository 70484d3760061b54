from arcade.modules.leaderboard.service import LeaderboardService, RankResult, utc_midnight

__all__ = ["LeaderboardService", "RankResult", "utc_midnight"]
