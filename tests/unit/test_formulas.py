"""
Unit tests for progression and score comparison formulas.
"""

import pytest

from arcade.modules.shared.formulas import (
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

pytestmark = pytest.mark.unit


class TestLevelFromXp:
    """XP -> level curve."""

    @pytest.mark.parametrize(
        "xp, level",
        [(0, 1), (1, 1), (99, 1), (100, 2), (399, 2), (400, 3), (8100, 10), (8099, 9)],
    )
    def test_known_boundaries(self, xp, level):
        assert level_from_xp(xp) == level

    def test_negative_xp_is_level_one(self):
        assert level_from_xp(-500) == 1

    def test_monotonic_non_decreasing(self):
        levels = [level_from_xp(xp) for xp in range(0, 20_000, 7)]
        assert all(a <= b for a, b in zip(levels, levels[1:]))
        assert min(levels) >= 1

    def test_exact_on_large_perfect_squares(self):
        # Float sqrt would misround near these values
        xp = (10 * 123_456_789) ** 2
        assert level_from_xp(xp) == 123_456_790
        assert level_from_xp(xp - 1) == 123_456_789


class TestXpRequiredForLevel:
    def test_level_one_and_below_need_nothing(self):
        assert xp_required_for_level(1) == 0
        assert xp_required_for_level(0) == 0
        assert xp_required_for_level(-3) == 0

    def test_inverse_of_level_from_xp(self):
        for level in range(1, 500):
            assert level_from_xp(xp_required_for_level(level)) == level

    def test_one_below_threshold_is_previous_level(self):
        for level in range(2, 200):
            assert level_from_xp(xp_required_for_level(level) - 1) == level - 1


class TestProgress:
    def test_zero_xp_is_zero_progress(self):
        assert progress_to_next_level(0) == 0.0

    def test_halfway_through_level_two(self):
        # Level 2 spans 100..400
        assert progress_to_next_level(250) == pytest.approx(50.0)

    def test_threshold_resets_progress(self):
        assert progress_to_next_level(400) == 0.0

    def test_progress_always_in_range(self):
        for xp in range(0, 5000, 13):
            assert 0.0 <= progress_to_next_level(xp) < 100.0

    def test_level_progress_card(self):
        card = level_progress(250)

        assert card["level"] == 2
        assert card["tier"] == "Rookie"
        assert card["current_level_xp"] == 100
        assert card["next_level_xp"] == 400
        assert card["xp_to_next_level"] == 150
        assert card["progress_percent"] == pytest.approx(50.0)


class TestTiers:
    @pytest.mark.parametrize(
        "level, tier",
        [(1, "Rookie"), (9, "Rookie"), (10, "Cyberpunk"), (19, "Cyberpunk"),
         (20, "Hacker"), (29, "Hacker"), (30, "Legend"), (250, "Legend")],
    )
    def test_default_tiers(self, level, tier):
        assert tier_for_level(level) == tier

    def test_tier_order_does_not_matter(self):
        shuffled = list(reversed(DEFAULT_TIERS))
        assert tier_for_level(21, shuffled) == "Hacker"

    def test_level_below_every_threshold_gets_lowest_tier(self):
        assert tier_for_level(0) == "Rookie"


class TestScoreComparison:
    def test_strictly_better_only(self):
        assert is_better_score(11, 10, lower_is_better=False)
        assert not is_better_score(10, 10, lower_is_better=False)
        assert is_better_score(9, 10, lower_is_better=True)
        assert not is_better_score(10, 10, lower_is_better=True)

    def test_fold_empty_is_none_not_zero(self):
        assert fold_best_score([], lower_is_better=False) is None
        assert fold_best_score([], lower_is_better=True) is None

    def test_fold_follows_direction(self):
        values = [12.5, 9.0, 30.0, 9.0]
        assert fold_best_score(values, lower_is_better=False) == 30.0
        assert fold_best_score(values, lower_is_better=True) == 9.0

    def test_fold_handles_negative_values(self):
        assert fold_best_score([-5, -2, -9], lower_is_better=False) == -2


class TestRankAmong:
    def test_lone_player_is_first(self):
        assert rank_among(42, [], lower_is_better=False) == 1

    def test_single_best_is_first(self):
        assert rank_among(100, [90, 80], lower_is_better=False) == 1

    def test_ties_share_rank(self):
        assert rank_among(100, [100, 50], lower_is_better=False) == 1

    def test_rank_after_tie_counts_every_better_player(self):
        assert rank_among(50, [100, 100], lower_is_better=False) == 3

    def test_lower_is_better(self):
        assert rank_among(12.0, [10.5, 15.0, 11.9], lower_is_better=True) == 3
