"""
Point of Order Gymnasium 环境

遵循标准 Gymnasium API，每一步可以按下一个位置或等待，然后时钟前进一个 tick
"""
from typing import Any, Dict, List, Optional, Tuple
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from core.cards import DECK_SIZE, cards_to_str
from core.config import GameConfig
from core.generator import PILE_SIZE
from core.selector import NUM_CHOICES
from core.state import GameSession, Phase, SessionEvent

from .observation import ObservationBuilder, PHASE_ORDER
from .reward import RewardCalculator, RewardConfig


WAIT_ACTION = 0


class PointOfOrderEnv(gym.Env):
    """
    Point of Order 环境

    动作:
    - 0: 等待 (不按任何位置)
    - k (1-4): 按下位置 k-1

    API:
    - reset() -> observation, info
    - step(action) -> observation, reward, terminated, truncated, info
    """

    metadata = {
        "render_modes": ["human", "ansi"],
        "name": "PointOfOrder-v0",
    }

    def __init__(
        self,
        render_mode: Optional[str] = None,
        serial: Optional[str] = None,
        config: Optional[GameConfig] = None,
        reward_config: Optional[RewardConfig] = None,
        max_episode_steps: int = 600,
        seed: Optional[int] = None,
    ):
        """
        Args:
            render_mode: 渲染模式 ("human", "ansi", None)
            serial: 固定序列号 (None 表示每局随机)
            config: 游戏配置
            reward_config: 奖励配置
            max_episode_steps: 每局最大步数
            seed: 首次 reset 使用的随机种子
        """
        super().__init__()

        self.render_mode = render_mode
        self._serial = serial
        self._config = (config or GameConfig()).validate()
        self._seed = seed
        self._max_episode_steps = max_episode_steps

        self._obs_builder = ObservationBuilder()
        self._reward_calculator = RewardCalculator(reward_config)

        self._session: Optional[GameSession] = None
        self._steps = 0
        self._seeded = False

        self.action_space = spaces.Discrete(NUM_CHOICES + 1)
        self.observation_space = spaces.Dict({
            "pile": spaces.Box(0, 1, shape=(PILE_SIZE, DECK_SIZE), dtype=np.float32),
            "choices": spaces.Box(0, 1, shape=(NUM_CHOICES, DECK_SIZE), dtype=np.float32),
            "phase": spaces.Box(0, 1, shape=(len(PHASE_ORDER),), dtype=np.float32),
            "locked": spaces.Box(0, 1, shape=(NUM_CHOICES,), dtype=np.float32),
            "time_left": spaces.Box(0, 1, shape=(1,), dtype=np.float32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        重置环境: 生成新谜题

        Args:
            seed: 随机种子
            options: 额外选项 (支持 "serial")

        Returns:
            (observation, info) 元组
        """
        if seed is None and not self._seeded:
            seed = self._seed
        super().reset(seed=seed)
        self._seeded = True

        options = options or {}
        serial = options.get("serial", self._serial)
        game_seed = int(self.np_random.integers(0, 2**31 - 1))

        self._session = GameSession.initial(serial=serial, seed=game_seed, config=self._config)
        self._steps = 0

        obs = self._build_observation()
        info = self._build_info([])

        if self.render_mode == "human":
            self.render()

        return obs, info

    def step(
        self,
        action: int,
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        执行动作

        Args:
            action: 0 表示等待，1-4 表示按下对应位置

        Returns:
            (observation, reward, terminated, truncated, info) 元组
        """
        if self._session is None:
            raise RuntimeError("Environment not reset. Call reset() first.")
        if not self.action_space.contains(int(action)):
            raise ValueError(
                f"Invalid action: {action}. Valid range: 0-{self.action_space.n - 1}"
            )

        first_event = len(self._session.events)

        accepted = True
        if action != WAIT_ACTION:
            accepted = self._session.press(int(action) - 1)
        self._session.tick()
        self._steps += 1

        new_events = self._session.events[first_event:]
        reward = self._reward_calculator.compute(new_events)

        terminated = self._session.is_solved
        truncated = not terminated and self._steps >= self._max_episode_steps

        obs = self._build_observation()
        info = self._build_info(new_events)
        info["accepted"] = accepted

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    def _build_observation(self) -> Dict[str, np.ndarray]:
        return self._obs_builder.build(self._session).to_dict()

    def _build_info(self, new_events: List[SessionEvent]) -> Dict[str, Any]:
        """构建 info 字典"""
        session = self._session
        return {
            "phase": session.phase.value,
            "serial": session.serial,
            "pile": session.puzzle.pile,
            "choices": session.visible_cards,
            "locked": session.locked,
            "time_left": session.time_left,
            "mistakes": session.mistakes,
            "round_number": session.round_number,
            "events": list(new_events),
            "step_count": self._steps,
        }

    def render(self) -> Optional[str]:
        """渲染环境"""
        if self.render_mode == "ansi" or self.render_mode == "human":
            return self._render_text()
        return None

    def _render_text(self) -> str:
        """文本渲染"""
        session = self._session
        lines = []
        lines.append("=" * 50)
        lines.append(f"Serial: {session.serial}")
        lines.append(f"Pile: {cards_to_str(session.puzzle.pile)}")
        lines.append(f"Phase: {session.phase.value}")

        visible = session.visible_cards
        if visible is None:
            lines.append("Choices: " + " ".join(["[##]"] * NUM_CHOICES))
        else:
            slots = []
            for card, locked in zip(visible, session.locked):
                slots.append(f"({card})" if locked else f"[{card}]")
            lines.append("Choices: " + " ".join(slots))

        if session.phase == Phase.REVEALED:
            lines.append(f"Time Left: {session.time_left:.1f}s")
        lines.append(f"Mistakes: {session.mistakes}")
        lines.append("=" * 50)

        output = "\n".join(lines)
        if self.render_mode == "human":
            print(output)
        return output

    def close(self):
        """关闭环境"""
        pass

    @property
    def session(self) -> Optional[GameSession]:
        """获取当前会话 (用于调试)"""
        return self._session


def make_env(**kwargs) -> PointOfOrderEnv:
    """
    工厂函数：创建环境

    Args:
        **kwargs: 环境参数

    Returns:
        PointOfOrderEnv 实例
    """
    return PointOfOrderEnv(**kwargs)
