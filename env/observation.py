"""
观察空间编码

将会话状态转换为数值特征
"""
from dataclasses import dataclass
from typing import Dict, List
import numpy as np

from core.cards import DECK_SIZE, cards_to_array
from core.selector import NUM_CHOICES
from core.state import GameSession, Phase


PHASE_ORDER: List[Phase] = [Phase.IDLE, Phase.REVEALED, Phase.RESOLVING, Phase.SOLVED]


@dataclass
class Observation:
    """
    结构化观测

    Attributes:
        pile: 牌堆，每张一行 one-hot (5, 52)
        choices: 朝上的候选牌 (4, 52)，背面朝上时全 0
        phase: 阶段 one-hot (4,)
        locked: 各位置是否锁定 (4,)
        time_left: 剩余时间占时限的比例 (1,)
    """
    pile: np.ndarray
    choices: np.ndarray
    phase: np.ndarray
    locked: np.ndarray
    time_left: np.ndarray

    def to_dict(self) -> Dict[str, np.ndarray]:
        """转换为字典格式"""
        return {
            "pile": self.pile,
            "choices": self.choices,
            "phase": self.phase,
            "locked": self.locked,
            "time_left": self.time_left,
        }

    def to_flat_array(self) -> np.ndarray:
        """
        展平为单一向量

        特征维度: 5*52 + 4*52 + 4 + 4 + 1 = 477
        """
        return np.concatenate([
            self.pile.flatten(),
            self.choices.flatten(),
            self.phase,
            self.locked,
            self.time_left,
        ])


class ObservationBuilder:
    """负责将 GameSession 转换为 Observation"""

    def build(self, session: GameSession) -> Observation:
        pile = np.stack([cards_to_array([card]) for card in session.puzzle.pile])

        choices = np.zeros((NUM_CHOICES, DECK_SIZE), dtype=np.float32)
        visible = session.visible_cards
        if visible is not None:
            for i, card in enumerate(visible):
                choices[i] = cards_to_array([card])

        phase = np.zeros(len(PHASE_ORDER), dtype=np.float32)
        phase[PHASE_ORDER.index(session.phase)] = 1

        locked = np.array(session.locked, dtype=np.float32)
        time_left = np.array(
            [session.time_left / session.config.timeout], dtype=np.float32
        )

        return Observation(
            pile=pile,
            choices=choices,
            phase=phase,
            locked=locked,
            time_left=time_left,
        )
