"""
牌堆生成器 - 回溯搜索

生成一个 5 张牌的牌堆:
- 每对相邻牌满足全部生效规则
- 每条未生效规则在牌堆中至少被违反一次
- 可接的牌 (acceptable) 非空且不超过 8 张
- 差一条规则的干扰牌 (decoys) 至少 4 张
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import logging
import random

from .cards import ALL_CARDS, Card, cards_to_str, random_card
from .config import GameConfig
from .rules import (
    Rule,
    RuleEngine,
    RuleSelection,
    SessionParameters,
    build_rule_pool,
)

logger = logging.getLogger(__name__)


PILE_SIZE = 5
MIN_DECOYS = 4
MAX_ACCEPTABLE = 8


class GenerationError(RuntimeError):
    """在尝试上限内无法生成合法谜题 (配置错误)"""


@dataclass(frozen=True)
class Puzzle:
    """
    已生成的谜题 (会话内不可变)

    Attributes:
        params: 会话参数
        selection: 生效/未生效规则划分
        pile: 牌堆 (5 张，互不相同)
        acceptable: 可以接在牌堆后的牌
        decoys: 只差一条生效规则的干扰牌
    """
    params: SessionParameters
    selection: RuleSelection
    pile: Tuple[Card, ...]
    acceptable: Tuple[Card, ...]
    decoys: Tuple[Card, ...]

    @property
    def active_rules(self) -> Tuple[Rule, ...]:
        return self.selection.active

    @property
    def inactive_rules(self) -> Tuple[Rule, ...]:
        return self.selection.inactive

    @property
    def last_card(self) -> Card:
        return self.pile[-1]


class PileGenerator:
    """
    牌堆生成器

    对每次尝试: 重新抽取规则划分与起始牌，然后深度优先回溯搜索
    """

    def __init__(
        self,
        params: SessionParameters,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            params: 会话参数
            config: 游戏配置 (使用其中的生成尝试上限)
            rng: 随机数生成器
        """
        self.params = params
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.pool = build_rule_pool(params)

    def generate(self) -> Puzzle:
        """
        生成谜题

        Returns:
            满足所有不变式的谜题

        Raises:
            GenerationError: 超过最大尝试次数
        """
        for attempt in range(1, self.config.max_generation_attempts + 1):
            selection = RuleSelection.draw(self.pool, self.rng)
            pile = [random_card(self.rng)]

            result = self.search(selection, pile)
            if result is None:
                logger.debug(f"Attempt {attempt}: search exhausted from {pile[0]}")
                continue

            acceptable, decoys = result
            if len(acceptable) > MAX_ACCEPTABLE:
                logger.debug(
                    f"Attempt {attempt}: {len(acceptable)} acceptable cards, retrying"
                )
                continue

            logger.info(f"Generated pile after {attempt} attempt(s): {cards_to_str(pile)}")
            return Puzzle(
                params=self.params,
                selection=selection,
                pile=tuple(pile),
                acceptable=acceptable,
                decoys=decoys,
            )

        logger.error(
            f"Failed to generate a puzzle within {self.config.max_generation_attempts} attempts"
        )
        raise GenerationError(
            f"No valid puzzle after {self.config.max_generation_attempts} attempts"
        )

    def search(
        self,
        selection: RuleSelection,
        pile: List[Card],
    ) -> Optional[Tuple[Tuple[Card, ...], Tuple[Card, ...]]]:
        """
        回溯搜索，原地扩展 pile

        Args:
            selection: 规则划分
            pile: 当前牌堆 (至少含起始牌)，成功时为完整牌堆，失败时恢复原样

        Returns:
            成功时返回 (acceptable, decoys)，失败返回 None
        """
        if len(pile) == PILE_SIZE:
            acceptable = self.compute_acceptable(pile, selection.active)
            if not acceptable:
                return None

            decoys = self.compute_decoys(pile, selection.active, acceptable)
            if len(decoys) < MIN_DECOYS:
                return None
            return acceptable, decoys

        candidates = self._candidates(pile, selection.active)

        # 最后一张: 整个牌堆还必须否定每条未生效规则
        if len(pile) == PILE_SIZE - 1:
            candidates = [
                c for c in candidates
                if self.disproves_inactive(pile + [c], selection.inactive)
            ]

        self.rng.shuffle(candidates)
        for card in candidates:
            pile.append(card)
            result = self.search(selection, pile)
            if result is not None:
                return result
            pile.pop()
        return None

    @staticmethod
    def _candidates(pile: Sequence[Card], active: Sequence[Rule]) -> List[Card]:
        """未使用且满足所有生效规则的牌"""
        used = set(pile)
        return [
            c for c in ALL_CARDS
            if c not in used and RuleEngine.satisfies_all(active, c, pile)
        ]

    @staticmethod
    def disproves_inactive(pile: Sequence[Card], inactive: Sequence[Rule]) -> bool:
        """每条未生效规则都至少被一对相邻牌违反"""
        return all(RuleEngine.violated_somewhere(rule, pile) for rule in inactive)

    @staticmethod
    def compute_acceptable(pile: Sequence[Card], active: Sequence[Rule]) -> Tuple[Card, ...]:
        """
        计算可接的牌

        Args:
            pile: 完整牌堆
            active: 生效规则

        Returns:
            不在牌堆中、对最后一张满足全部生效规则的牌
        """
        return tuple(PileGenerator._candidates(pile, active))

    @staticmethod
    def compute_decoys(
        pile: Sequence[Card],
        active: Sequence[Rule],
        acceptable: Sequence[Card],
    ) -> Tuple[Card, ...]:
        """
        计算干扰牌

        Args:
            pile: 完整牌堆
            active: 生效规则
            acceptable: 可接的牌

        Returns:
            不在牌堆和 acceptable 中、恰好满足 len(active) - 1 条生效规则的牌
        """
        excluded = set(pile) | set(acceptable)
        return tuple(
            c for c in ALL_CARDS
            if c not in excluded
            and RuleEngine.count_satisfied(active, c, pile) == len(active) - 1
        )
