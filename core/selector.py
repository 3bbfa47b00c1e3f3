"""
干扰牌选择 - 每次翻牌时抽取正确牌与三张干扰牌
"""
from dataclasses import dataclass
from typing import Optional, Tuple
import random

from .cards import Card
from .generator import Puzzle


NUM_CHOICES = 4


@dataclass(frozen=True)
class RoundState:
    """
    一轮翻牌的四张候选牌

    Attributes:
        cards: 四个位置上的牌
        correct_index: 正确牌所在位置
    """
    cards: Tuple[Card, ...]
    correct_index: int

    @property
    def correct_card(self) -> Card:
        return self.cards[self.correct_index]

    def is_correct(self, slot: int) -> bool:
        return slot == self.correct_index


class DecoySelector:
    """
    候选牌选择器

    acceptable/decoys 在会话内固定，每次 draw() 只重新抽取正确牌与干扰牌顺序
    """

    def __init__(self, puzzle: Puzzle, rng: Optional[random.Random] = None):
        self.puzzle = puzzle
        self.rng = rng or random.Random()

    def draw(self) -> RoundState:
        """
        抽取一轮候选牌

        Returns:
            正确牌位于随机位置，其余位置按洗牌顺序放干扰牌
        """
        correct = self.rng.choice(self.puzzle.acceptable)

        # 复制后洗牌，不修改谜题本身
        decoys = list(self.puzzle.decoys)
        self.rng.shuffle(decoys)
        decoys = decoys[:NUM_CHOICES - 1]

        correct_index = self.rng.randrange(NUM_CHOICES)
        cards = decoys[:correct_index] + [correct] + decoys[correct_index:]

        return RoundState(cards=tuple(cards), correct_index=correct_index)
