"""Tests for game configuration loading."""

import pytest

from swipe_beat.config import ConfigError, GameConfig, load_config


class TestGameConfig:
    def test_defaults(self):
        config = GameConfig()
        assert config.max_cards == 20
        assert config.swipe_threshold == 100.0
        assert config.velocity_threshold == 500.0
        assert config.beat_match_tolerance == 0.2
        assert config.max_visible == 6

    def test_from_dict(self):
        config = GameConfig.from_dict({"max_cards": "30", "swipe_threshold": 80})
        assert config.max_cards == 30
        assert isinstance(config.max_cards, int)
        assert config.swipe_threshold == 80.0
        assert isinstance(config.swipe_threshold, float)

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="bogus"):
            GameConfig.from_dict({"bogus": 1})

    @pytest.mark.parametrize("overrides", [
        {"max_cards": 0},
        {"swipe_threshold": 0},
        {"beat_match_tolerance": -0.1},
        {"max_visible": 0},
        {"refill_lookahead": -1},
        {"refill_lookahead": 0},
        {"swipe_threshold": float("nan")},
        {"beat_match_tolerance": float("inf")},
        {"advance_delay": float("nan")},
        {"advance_delay": -0.5},
    ])
    def test_out_of_range(self, overrides):
        with pytest.raises(ConfigError):
            GameConfig(**overrides)

    def test_bad_value(self):
        with pytest.raises(ConfigError, match="max_cards"):
            GameConfig.from_dict({"max_cards": "lots"})

    def test_yaml_roundtrip(self, tmp_path):
        path = tmp_path / "config.yml"
        GameConfig(max_cards=12, beat_match_tolerance=0.15).to_yaml(path)
        loaded = GameConfig.from_yaml(path)
        assert loaded.max_cards == 12
        assert loaded.beat_match_tolerance == 0.15

    def test_empty_yaml_is_defaults(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("")
        assert GameConfig.from_yaml(path) == GameConfig()

    def test_zero_lookahead_from_env(self):
        with pytest.raises(ConfigError, match="refill_lookahead"):
            GameConfig().with_env_overrides({"SWIPE_BEAT_REFILL_LOOKAHEAD": "0"})

    def test_unreadable_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_bytes(b"\xff\xfe\x80")
        with pytest.raises(ConfigError):
            GameConfig.from_yaml(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("max_cards: [1\n")
        with pytest.raises(ConfigError, match="parse"):
            GameConfig.from_yaml(path)

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError):
            GameConfig.from_yaml(path)


class TestEnvironment:
    def test_env_overrides(self):
        config = GameConfig().with_env_overrides({
            "SWIPE_BEAT_MAX_CARDS": "8",
            "SWIPE_BEAT_VELOCITY_THRESHOLD": "650.5",
            "UNRELATED": "x",
        })
        assert config.max_cards == 8
        assert config.velocity_threshold == 650.5

    def test_no_overrides_returns_same(self):
        config = GameConfig()
        assert config.with_env_overrides({}) is config

    def test_load_config_from_env_path(self, tmp_path):
        path = tmp_path / "game.yml"
        path.write_text("max_visible: 4\nmax_cards: 10\n")
        config = load_config(environ={
            "SWIPE_BEAT_CONFIG": str(path),
            "SWIPE_BEAT_MAX_CARDS": "15",
        })
        assert config.max_visible == 4
        assert config.max_cards == 15  # env beats file

    def test_load_config_defaults(self):
        assert load_config(environ={}) == GameConfig()

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "game.yml"
        path.write_text("initial_cards: 5\n")
        assert load_config(path, environ={}).initial_cards == 5
