"""
牌的定义与编码

使用标准 52 张扑克牌 (无大小王):
- 点数 A, 2-10, J, Q, K (编码 0-12)
- 花色 ♠ ♥ ♣ ♦ (编码 0-3)
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, List, Tuple
import random

import numpy as np


class Suit(IntEnum):
    """花色定义"""
    SPADES = 0
    HEARTS = 1
    CLUBS = 2
    DIAMONDS = 3


class Rank(IntEnum):
    """点数定义 (A 最小)"""
    ACE = 0
    TWO = 1
    THREE = 2
    FOUR = 3
    FIVE = 4
    SIX = 5
    SEVEN = 6
    EIGHT = 7
    NINE = 8
    TEN = 9
    JACK = 10
    QUEEN = 11
    KING = 12


NUM_RANKS = 13
NUM_SUITS = 4
DECK_SIZE = NUM_RANKS * NUM_SUITS

# 点数到显示字符的映射
RANK_TO_STR: Dict[Rank, str] = {
    Rank.ACE: 'A', Rank.TWO: '2', Rank.THREE: '3', Rank.FOUR: '4',
    Rank.FIVE: '5', Rank.SIX: '6', Rank.SEVEN: '7', Rank.EIGHT: '8',
    Rank.NINE: '9', Rank.TEN: '10', Rank.JACK: 'J', Rank.QUEEN: 'Q',
    Rank.KING: 'K',
}

# 花色到显示字符的映射
SUIT_TO_STR: Dict[Suit, str] = {
    Suit.SPADES: '♠',
    Suit.HEARTS: '♥',
    Suit.CLUBS: '♣',
    Suit.DIAMONDS: '♦',
}

# 解析用: 字母/符号 -> 花色
STR_TO_SUIT: Dict[str, Suit] = {
    'S': Suit.SPADES, '♠': Suit.SPADES,
    'H': Suit.HEARTS, '♥': Suit.HEARTS,
    'C': Suit.CLUBS, '♣': Suit.CLUBS,
    'D': Suit.DIAMONDS, '♦': Suit.DIAMONDS,
}

STR_TO_RANK: Dict[str, Rank] = {v: k for k, v in RANK_TO_STR.items()}
STR_TO_RANK['T'] = Rank.TEN


@dataclass(frozen=True)
class Card:
    """
    单张牌 (不可变值类型)

    只需要相等性与集合成员判断，不定义大小顺序

    Attributes:
        rank: 点数
        suit: 花色
    """
    rank: Rank
    suit: Suit

    def __post_init__(self):
        # 允许传入 int，统一转换为枚举
        object.__setattr__(self, "rank", Rank(self.rank))
        object.__setattr__(self, "suit", Suit(self.suit))

    @property
    def index(self) -> int:
        """牌在 52 张牌中的索引 (rank * 4 + suit)"""
        return int(self.rank) * NUM_SUITS + int(self.suit)

    @classmethod
    def from_index(cls, index: int) -> 'Card':
        """由索引构造牌"""
        if not 0 <= index < DECK_SIZE:
            raise ValueError(f"Card index out of range: {index}")
        return cls(Rank(index // NUM_SUITS), Suit(index % NUM_SUITS))

    def __str__(self) -> str:
        return RANK_TO_STR[self.rank] + SUIT_TO_STR[self.suit]


# 完整牌组 (52 张，按索引排列)
ALL_CARDS: Tuple[Card, ...] = tuple(Card.from_index(i) for i in range(DECK_SIZE))


def random_card(rng: random.Random) -> Card:
    """均匀随机抽取一张牌"""
    return ALL_CARDS[rng.randrange(DECK_SIZE)]


def cards_to_array(cards: Iterable[Card]) -> np.ndarray:
    """
    将牌集合转换为 52 维 one-hot 向量

    Args:
        cards: 牌列表

    Returns:
        52 维 numpy 数组，第 card.index 位为 1
    """
    array = np.zeros(DECK_SIZE, dtype=np.float32)
    for card in cards:
        array[card.index] = 1
    return array


def array_to_cards(array: np.ndarray) -> List[Card]:
    """
    将 52 维数组转换回牌列表 (按索引排序)

    Args:
        array: 52 维 numpy 数组

    Returns:
        牌列表
    """
    return [ALL_CARDS[i] for i in np.flatnonzero(array[:DECK_SIZE] > 0)]


def cards_to_str(cards: Iterable[Card]) -> str:
    """
    将牌列表转换为可读字符串

    Returns:
        如 "A♠, 10♥, K♦"
    """
    return ", ".join(str(c) for c in cards)


def str_to_card(s: str) -> Card:
    """
    将字符串解析为牌

    Args:
        s: 如 "10H", "10♥", "qs", "A♠"

    Returns:
        牌

    Raises:
        ValueError: 无法识别的点数或花色
    """
    text = s.strip().upper()
    if len(text) < 2:
        raise ValueError(f"Invalid card: {s!r}")

    rank_text, suit_text = text[:-1], text[-1]
    if rank_text not in STR_TO_RANK or suit_text not in STR_TO_SUIT:
        raise ValueError(f"Invalid card: {s!r}")
    return Card(STR_TO_RANK[rank_text], STR_TO_SUIT[suit_text])
