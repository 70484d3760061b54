"""
Unit tests for ConfigManager YAML loading and overrides.
"""

import pytest

from arcade.core.config.manager import ConfigInitializationError, ConfigManager

pytestmark = pytest.mark.unit


@pytest.fixture
def fresh_config():
    ConfigManager.reset()
    yield ConfigManager
    ConfigManager.reset()


class TestConfigManager:
    def test_deep_merges_yaml_files(self, tmp_path, fresh_config):
        (tmp_path / "a.yaml").write_text("profile:\n  top_games_limit: 5\nshop:\n  x: 1\n")
        (tmp_path / "b.yaml").write_text("shop:\n  acquisition_source: promo\n")

        fresh_config.load(tmp_path)

        assert fresh_config.get("profile.top_games_limit") == 5
        assert fresh_config.get("shop.x") == 1
        assert fresh_config.get("shop.acquisition_source") == "promo"
        assert fresh_config.get_all_keys() == ["profile", "shop"]

    def test_missing_key_returns_default(self, tmp_path, fresh_config):
        fresh_config.load(tmp_path)
        assert fresh_config.get("leaderboard.daily_limit", 20) == 20

    def test_missing_directory_is_not_an_error(self, tmp_path, fresh_config):
        fresh_config.load(tmp_path / "does-not-exist")
        assert fresh_config.get("anything", "fallback") == "fallback"

    def test_malformed_yaml_raises(self, tmp_path, fresh_config):
        (tmp_path / "bad.yaml").write_text("profile: [unclosed\n")

        with pytest.raises(ConfigInitializationError):
            fresh_config.load(tmp_path)

    def test_override_wins_and_clears(self, tmp_path, fresh_config):
        (tmp_path / "a.yaml").write_text("profile:\n  top_games_limit: 3\n")
        fresh_config.load(tmp_path)

        fresh_config.override("profile.top_games_limit", 1)
        assert fresh_config.get("profile.top_games_limit") == 1

        fresh_config.clear_overrides()
        assert fresh_config.get("profile.top_games_limit") == 3

    def test_repository_defaults_load(self, fresh_config):
        assert fresh_config.get("profile.top_games_limit") == 3
        assert fresh_config.get("avatars.image_base_path") == "/avatars/"
        assert fresh_config.get("progression.tiers")[0] == {"min_level": 1, "name": "Rookie"}
