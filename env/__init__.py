"""
Environment Layer - Gymnasium 兼容环境

Modules:
    point_of_order_env: 主环境类
    observation: 观测空间构建
    reward: 奖励函数
"""
from .point_of_order_env import (
    WAIT_ACTION,
    PointOfOrderEnv,
    make_env,
)

from .observation import (
    PHASE_ORDER,
    Observation,
    ObservationBuilder,
)

from .reward import (
    RewardConfig,
    RewardCalculator,
)

__all__ = [
    # env
    "WAIT_ACTION",
    "PointOfOrderEnv",
    "make_env",
    # observation
    "PHASE_ORDER",
    "Observation",
    "ObservationBuilder",
    # reward
    "RewardConfig",
    "RewardCalculator",
]
