"""
游戏配置

定义计时、生成上限等可调参数
"""
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json


@dataclass
class GameConfig:
    """
    游戏配置

    Attributes:
        timeout: 翻开后等待选择的时限 (秒)
        poll_interval: 倒计时轮询间隔 (秒)
        flip_stagger: 第 i 张牌翻转前的延迟为 i * flip_stagger (秒)
        flip_duration: 单张牌翻转动画时长 (秒)
        tick_interval: 环境每步推进的时间 (秒)
        max_generation_attempts: 生成谜题的最大尝试次数
        serial: 序列号 (None 表示随机生成)
        seed: 随机种子
    """
    # 计时
    timeout: float = 5.0
    poll_interval: float = 0.1
    flip_stagger: float = 0.2
    flip_duration: float = 0.5
    tick_interval: float = 0.1

    # 生成
    max_generation_attempts: int = 1000

    # 会话
    serial: Optional[str] = None
    seed: Optional[int] = None

    def validate(self) -> 'GameConfig':
        """
        校验配置

        Raises:
            ValueError: 时间参数或尝试次数不为正，或超时前来不及翻完牌
        """
        for name in ("timeout", "poll_interval", "flip_duration", "tick_interval"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.flip_stagger < 0:
            raise ValueError(f"flip_stagger must be non-negative, got {self.flip_stagger}")
        if self.poll_interval > self.timeout:
            raise ValueError(
                f"poll_interval ({self.poll_interval}) must not exceed timeout ({self.timeout})"
            )
        # 第 4 张牌 (位置 3) 最晚解锁，必须在超时前留出选择时间
        last_unlock = self.flip_stagger * 3 + self.flip_duration
        if last_unlock >= self.timeout:
            raise ValueError(
                f"Cards finish flipping at {last_unlock:g}s, "
                f"which leaves no time before the {self.timeout:g}s timeout"
            )
        if self.max_generation_attempts < 1:
            raise ValueError(
                f"max_generation_attempts must be at least 1, got {self.max_generation_attempts}"
            )
        return self

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'GameConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered).validate()

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> 'GameConfig':
        """从 JSON 文件加载配置"""
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
