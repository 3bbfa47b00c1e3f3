"""
奖励函数

由一步内产生的会话事件计算奖励:
- 解出: success_reward
- 每次失误 (选错或超时): mistake_penalty
- 每步: step_penalty
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from core.state import EventKind, SessionEvent


@dataclass
class RewardConfig:
    """奖励配置"""
    success_reward: float = 1.0
    mistake_penalty: float = -1.0
    step_penalty: float = 0.0


class RewardCalculator:
    """奖励计算器"""

    def __init__(self, config: Optional[RewardConfig] = None):
        self.config = config or RewardConfig()

    def compute(self, events: Iterable[SessionEvent]) -> float:
        """
        计算奖励

        Args:
            events: 本步新产生的事件

        Returns:
            奖励值
        """
        reward = self.config.step_penalty
        for event in events:
            if event.kind == EventKind.SUCCESS:
                reward += self.config.success_reward
            elif event.kind == EventKind.MISTAKE:
                reward += self.config.mistake_penalty
        return reward
