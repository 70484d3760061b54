"""
Integration Tests for ProfileService
====================================

End-to-end profile aggregation over real score, rank and avatar data.
"""

import pytest

from arcade.modules.profile.service import CareerStats, TopGame


@pytest.mark.integration
@pytest.mark.database
class TestPublicProfile:
    async def test_two_games(self, seed, profile_service):
        # Arrange: A is first in game a, seventh in game b
        await seed.player("hero", xp=2500, display_name="Hero")
        await seed.game("a", name="Alpha")
        await seed.game("b", name="Beta")
        await seed.scores("hero", "a", [900])
        await seed.scores("hero", "b", [10])
        for i in range(6):
            rival = f"rival{i}"
            await seed.player(rival)
            await seed.scores(rival, "a", [100 + i])
            await seed.scores(rival, "b", [20 + i])

        # Act
        profile = await profile_service.public_profile("hero")

        # Assert
        assert profile.top_games == [
            TopGame(game_id="a", game_name="Alpha", rank=1, score=900.0),
            TopGame(game_id="b", game_name="Beta", rank=7, score=10.0),
        ]
        assert profile.career_stats == CareerStats(total_rank_1=1, total_rank_le_5=1)
        assert profile.player["display_name"] == "Hero"
        assert profile.player["level"] == 6
        assert profile.player["tier"] == "Rookie"

    async def test_player_without_scores(self, seed, profile_service):
        await seed.player("idle")

        profile = await profile_service.public_profile("idle")

        assert profile.top_games == []
        assert profile.career_stats == CareerStats()
        assert profile.player["level"] == 1
        assert profile.player["xp_to_next_level"] == 100

    async def test_unknown_player(self, seed, profile_service):
        assert await profile_service.public_profile("ghost") is None

    async def test_top_games_limited_and_tie_broken_by_game_id(self, seed, profile_service):
        await seed.player("solo")
        for gid in ("d", "c", "b", "a"):
            await seed.game(gid)
            await seed.scores("solo", gid, [1])

        profile = await profile_service.public_profile("solo")

        assert [g.game_id for g in profile.top_games] == ["a", "b", "c"]
        assert profile.career_stats.total_rank_1 == 4
        assert profile.career_stats.total_rank_le_5 == 4

    async def test_lower_is_better_game(self, seed, profile_service):
        await seed.player("fast")
        await seed.player("slow")
        await seed.game("speed_run", lower_is_better=True)
        await seed.scores("fast", "speed_run", [31.5])
        await seed.scores("slow", "speed_run", [45.0])

        profile = await profile_service.public_profile("slow")

        assert profile.top_games == [
            TopGame(game_id="speed_run", game_name="Speed Run", rank=2, score=45.0)
        ]

    async def test_avatar_url_after_cache_warm(self, seed, profile_service, avatar_service):
        await seed.player("p1")
        await seed.avatar("neon_fox", image_url="neon_fox.png")
        await seed.ownership("p1", "neon_fox")
        await avatar_service.equip_avatar("p1", "neon_fox")

        profile = await profile_service.public_profile("p1")

        assert profile.player["equipped_avatar_id"] == "neon_fox"
        assert profile.player["avatar_url"] == "/avatars/neon_fox.png"

    async def test_to_dict(self, seed, profile_service):
        await seed.player("p1")

        data = (await profile_service.public_profile("p1")).to_dict()

        assert set(data) == {"player", "top_games", "career_stats"}
        assert data["career_stats"] == {"total_rank_1": 0, "total_rank_le_5": 0}
