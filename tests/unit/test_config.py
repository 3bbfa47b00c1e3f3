"""配置测试"""
import json

import pytest

from core.config import GameConfig


class TestGameConfig:
    """GameConfig 测试"""

    def test_defaults(self):
        config = GameConfig()
        assert config.timeout == 5.0
        assert config.poll_interval == 0.1
        assert config.flip_stagger == 0.2
        assert config.flip_duration == 0.5
        assert config.max_generation_attempts == 1000
        assert config.serial is None
        assert config.validate() is config

    def test_from_dict_ignores_unknown_keys(self):
        config = GameConfig.from_dict({"timeout": 3.0, "serial": "AB1CD2", "unknown": 1})
        assert config.timeout == 3.0
        assert config.serial == "AB1CD2"
        assert not hasattr(config, "unknown")

    @pytest.mark.parametrize("overrides", [
        {"timeout": 0},
        {"poll_interval": -0.1},
        {"flip_duration": 0},
        {"tick_interval": 0},
        {"flip_stagger": -1},
        {"max_generation_attempts": 0},
        {"timeout": 1.0, "poll_interval": 2.0},
        # 最后一张牌 1.1 秒才翻完
        {"timeout": 1.0},
        {"timeout": 1.1},
        {"timeout": 2.0, "flip_stagger": 0.5},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            GameConfig.from_dict(overrides)

    def test_short_timeout_with_fast_flips(self):
        config = GameConfig.from_dict({
            "timeout": 0.25,
            "poll_interval": 0.25,
            "flip_stagger": 0.02,
            "flip_duration": 0.1,
        })
        assert config.timeout == 0.25

    def test_from_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"timeout": 2.5, "seed": 7}), encoding="utf-8")

        config = GameConfig.from_json(path)
        assert config.timeout == 2.5
        assert config.seed == 7

    def test_to_dict(self):
        d = GameConfig(seed=3).to_dict()
        assert d["seed"] == 3
        assert GameConfig.from_dict(d) == GameConfig(seed=3)
