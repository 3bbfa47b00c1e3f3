"""
评估器

在大量随机生成的谜题上评估智能体表现
"""
from typing import Any, Callable, Dict, Optional, Sequence, Tuple
from dataclasses import dataclass
import numpy as np
import logging

from core.cards import Card
from core.rules import Rule, RuleEngine, SessionParameters, build_rule_pool
from core.state import Phase
from env.point_of_order_env import WAIT_ACTION

logger = logging.getLogger(__name__)


@dataclass
class EvalResult:
    """评估结果"""
    solve_rate: float
    avg_mistakes: float
    avg_reward: float
    avg_length: float
    games_played: int
    first_try_rate: float = 0.0

    def __repr__(self) -> str:
        return (
            f"EvalResult(solve_rate={self.solve_rate:.2%}, "
            f"avg_mistakes={self.avg_mistakes:.2f}, "
            f"games={self.games_played})"
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "solve_rate": self.solve_rate,
            "avg_mistakes": self.avg_mistakes,
            "avg_reward": self.avg_reward,
            "avg_length": self.avg_length,
            "games_played": self.games_played,
            "first_try_rate": self.first_try_rate,
        }


class Agent:
    """智能体基类"""

    def __init__(self, name: str = "agent"):
        self.name = name

    def act(self, obs: Dict[str, Any], info: Dict[str, Any]) -> int:
        """选择动作"""
        raise NotImplementedError

    def reset(self):
        """重置状态"""
        pass


class RandomAgent(Agent):
    """随机智能体: 翻牌后以一定概率随机按下一个位置"""

    def __init__(self, name: str = "random", press_prob: float = 0.2, seed: Optional[int] = None):
        super().__init__(name)
        self.press_prob = press_prob
        self._rng = np.random.default_rng(seed)

    def act(self, obs: Dict[str, Any], info: Dict[str, Any]) -> int:
        if info["phase"] == Phase.IDLE.value:
            return 1
        if self._rng.random() < self.press_prob:
            return int(self._rng.integers(1, len(info["locked"]) + 1))
        return WAIT_ACTION


class RuleInferenceAgent(Agent):
    """
    规则推理智能体

    根据序列号重建规则池，保留与整个牌堆一致的规则 (即生效规则)，
    然后选择满足全部这些规则的候选牌
    """

    def __init__(self, name: str = "inference"):
        super().__init__(name)
        self._cache: Dict[Tuple[str, Tuple[Card, ...]], Tuple[Rule, ...]] = {}

    @staticmethod
    def infer_rules(serial: str, pile: Sequence[Card]) -> Tuple[Rule, ...]:
        """
        推断生效规则

        Args:
            serial: 序列号
            pile: 牌堆

        Returns:
            牌堆中从未被违反的规则
        """
        pool = build_rule_pool(SessionParameters.from_serial(serial))
        return tuple(rule for rule in pool if RuleEngine.consistent_with(rule, pile))

    def act(self, obs: Dict[str, Any], info: Dict[str, Any]) -> int:
        if info["phase"] == Phase.IDLE.value:
            return 1
        if info["phase"] != Phase.REVEALED.value:
            return WAIT_ACTION

        key = (info["serial"], tuple(info["pile"]))
        if key not in self._cache:
            self._cache[key] = self.infer_rules(*key)
        rules = self._cache[key]

        pile = list(info["pile"])
        for slot, card in enumerate(info["choices"]):
            if RuleEngine.satisfies_all(rules, card, pile):
                # 等待翻转结束
                return WAIT_ACTION if info["locked"][slot] else slot + 1
        return WAIT_ACTION

    def reset(self):
        self._cache.clear()


class Evaluator:
    """
    评估器

    评估智能体在环境中的表现
    """

    def __init__(self, env_fn: Callable):
        self.env_fn = env_fn

    def evaluate(
        self,
        agent: Agent,
        n_games: int = 100,
        verbose: bool = False,
    ) -> EvalResult:
        """
        评估智能体

        Args:
            agent: 待评估智能体
            n_games: 游戏数量
            verbose: 是否输出详情

        Returns:
            评估结果
        """
        env = self.env_fn()

        solved = 0
        first_try = 0
        total_mistakes = 0
        total_reward = 0.0
        total_length = 0

        for game_idx in range(n_games):
            agent.reset()
            obs, info = env.reset()
            done = False
            episode_reward = 0.0
            episode_length = 0

            while not done:
                action = agent.act(obs, info)
                obs, reward, terminated, truncated, info = env.step(action)
                done = terminated or truncated
                episode_reward += reward
                episode_length += 1

            if terminated:
                solved += 1
                if info["mistakes"] == 0:
                    first_try += 1

            total_mistakes += info["mistakes"]
            total_reward += episode_reward
            total_length += episode_length

            if verbose and (game_idx + 1) % 10 == 0:
                logger.info(f"Game {game_idx + 1}/{n_games}, Solve rate: {solved/(game_idx+1):.2%}")

        env.close()

        return EvalResult(
            solve_rate=solved / n_games if n_games > 0 else 0.0,
            avg_mistakes=total_mistakes / n_games if n_games > 0 else 0.0,
            avg_reward=total_reward / n_games if n_games > 0 else 0.0,
            avg_length=total_length / n_games if n_games > 0 else 0.0,
            games_played=n_games,
            first_try_rate=first_try / n_games if n_games > 0 else 0.0,
        )
