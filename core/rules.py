"""
规则引擎 - 规则定义、会话参数、规则抽取

规则池固定为三条相邻约束 (只看候选牌与序列最后一张):
1. 花色转移: 下一张的花色必须在上一张花色的允许集合中
2. 整除交替: 点数 (A=1) 在 "能被 m 整除" 与 "不能" 之间交替
3. 点数距离: 相邻点数的环形距离为 d 或 d+1 (13 取模)

所有规则都是纯函数，不会抛出异常
"""
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, List, Sequence, Tuple
import random
import string

from .cards import Card, Suit, NUM_RANKS, SUIT_TO_STR


NUM_ACTIVE_RULES = 2

# 花色转移表: 由序列号前两位是否为字母决定
# 每项为 4 个字符串，第 i 个表示花色 i 之后允许的花色
SUIT_TABLES = {
    (True, True): ("01", "12", "23", "30"),
    (True, False): ("03", "10", "21", "32"),
    (False, True): ("12", "23", "30", "01"),
    (False, False): ("32", "03", "10", "21"),
}

MODULUS_BASE = 3
DIFFERENCE_BASE = 2

# 序列号字符集 (不含 O 和 Y，避免与 0 混淆)
SERIAL_LETTERS = "".join(c for c in string.ascii_uppercase if c not in "OY")
SERIAL_ALPHANUMERIC = SERIAL_LETTERS + string.digits


class RuleKind(Enum):
    """规则种类"""
    SUIT_TRANSITION = "suit_transition"
    DIVISIBILITY = "divisibility"
    RANK_DISTANCE = "rank_distance"


def _serial_value(char: str, base: int) -> int:
    """字符 -> 参数值: ((char - 'A' + 1) mod 3) + base"""
    return (ord(char) - ord('A') + 1) % 3 + base


@dataclass(frozen=True)
class SessionParameters:
    """
    会话参数 (每局只计算一次，不可变)

    Attributes:
        allowed_suits: 花色转移表，allowed_suits[s] 为花色 s 之后允许的花色
        modulus: 整除规则的模数 m ∈ {3, 4, 5}
        difference: 点数距离下限 d ∈ {2, 3, 4}，允许 d 与 d+1
    """
    allowed_suits: Tuple[FrozenSet[Suit], ...]
    modulus: int
    difference: int

    @classmethod
    def from_serial(cls, serial: str) -> 'SessionParameters':
        """
        由序列号推导会话参数

        - 第 1、2 位是否为字母 -> 选择花色转移表
        - 第 4 位 -> 模数 ((c - 'A' + 1) % 3 + 3)
        - 第 5 位 -> 距离 ((c - 'A' + 1) % 3 + 2)

        Args:
            serial: 序列号，至少 5 位字母数字，第 4、5 位必须为字母

        Returns:
            会话参数

        Raises:
            ValueError: 序列号格式不合法
        """
        serial = validate_serial(serial)

        table = SUIT_TABLES[(serial[0].isalpha(), serial[1].isalpha())]
        allowed = tuple(
            frozenset(Suit(int(ch)) for ch in entry)
            for entry in table
        )

        return cls(
            allowed_suits=allowed,
            modulus=_serial_value(serial[3], MODULUS_BASE),
            difference=_serial_value(serial[4], DIFFERENCE_BASE),
        )

    def describe(self) -> List[str]:
        """规则的可读描述 (每条规则一行)"""
        transitions = "; ".join(
            SUIT_TO_STR[suit] + " → "
            + "/".join(SUIT_TO_STR[s] for s in sorted(self.allowed_suits[suit]))
            for suit in Suit
        )
        return [
            f"Rule 1: Allowed suits: {transitions}",
            f"Rule 2: Ranks must alternate between being divisible by {self.modulus} and not",
            f"Rule 3: Consecutive ranks must differ by {self.difference} or "
            f"{self.difference + 1} (with wraparound)",
        ]


def validate_serial(serial: str) -> str:
    """
    校验并规范化序列号 (转大写)

    Raises:
        ValueError: 长度不足、含非字母数字字符、或第 4/5 位不是字母
    """
    if not isinstance(serial, str) or len(serial) < 5:
        raise ValueError(f"Serial number must have at least 5 characters: {serial!r}")
    serial = serial.upper()
    if not serial.isalnum() or not serial.isascii():
        raise ValueError(f"Serial number must be alphanumeric: {serial!r}")
    if not (serial[3].isalpha() and serial[4].isalpha()):
        raise ValueError(f"Serial number positions 4 and 5 must be letters: {serial!r}")
    return serial


def random_serial(rng: random.Random) -> str:
    """
    生成随机序列号

    格式: 两位字母数字 + 数字 + 两位字母 + 数字，如 "AB1CD2"
    """
    return (
        rng.choice(SERIAL_ALPHANUMERIC)
        + rng.choice(SERIAL_ALPHANUMERIC)
        + rng.choice(string.digits)
        + rng.choice(SERIAL_LETTERS)
        + rng.choice(SERIAL_LETTERS)
        + rng.choice(string.digits)
    )


@dataclass(frozen=True)
class Rule:
    """规则基类，子类携带自身参数"""

    @property
    def kind(self) -> RuleKind:
        raise NotImplementedError

    def check(self, candidate: Card, history: Sequence[Card]) -> bool:
        """
        检查候选牌能否接在序列之后

        Args:
            candidate: 候选牌
            history: 已有序列 (只使用最后一张)

        Returns:
            是否满足规则 (空序列不构成约束)
        """
        if not history:
            return True
        return self.allows(history[-1], candidate)

    def allows(self, last: Card, candidate: Card) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class SuitTransitionRule(Rule):
    """规则 1: 花色转移"""
    allowed_suits: Tuple[FrozenSet[Suit], ...]

    @property
    def kind(self) -> RuleKind:
        return RuleKind.SUIT_TRANSITION

    def allows(self, last: Card, candidate: Card) -> bool:
        return candidate.suit in self.allowed_suits[last.suit]


@dataclass(frozen=True)
class DivisibilityRule(Rule):
    """规则 2: 点数在能/不能被 m 整除之间交替"""
    modulus: int

    @property
    def kind(self) -> RuleKind:
        return RuleKind.DIVISIBILITY

    def is_divisible(self, card: Card) -> bool:
        return (card.rank + 1) % self.modulus == 0

    def allows(self, last: Card, candidate: Card) -> bool:
        return self.is_divisible(candidate) != self.is_divisible(last)


@dataclass(frozen=True)
class RankDistanceRule(Rule):
    """规则 3: 相邻点数环形距离为 d 或 d+1"""
    difference: int

    @property
    def kind(self) -> RuleKind:
        return RuleKind.RANK_DISTANCE

    def allows(self, last: Card, candidate: Card) -> bool:
        for step in (self.difference, self.difference + 1):
            if candidate.rank == (last.rank + step) % NUM_RANKS:
                return True
            if candidate.rank == (last.rank - step) % NUM_RANKS:
                return True
        return False


def build_rule_pool(params: SessionParameters) -> Tuple[Rule, ...]:
    """按 RuleKind 顺序构建规则池"""
    return (
        SuitTransitionRule(params.allowed_suits),
        DivisibilityRule(params.modulus),
        RankDistanceRule(params.difference),
    )


@dataclass(frozen=True)
class RuleSelection:
    """
    规则池的一次划分

    Attributes:
        active: 生效规则 (牌堆每一对相邻牌都满足)
        inactive: 未生效规则 (牌堆中至少一处违反)
    """
    active: Tuple[Rule, ...]
    inactive: Tuple[Rule, ...]

    @classmethod
    def draw(
        cls,
        pool: Sequence[Rule],
        rng: random.Random,
        num_active: int = NUM_ACTIVE_RULES,
    ) -> 'RuleSelection':
        """随机选出 num_active 条生效规则，其余为未生效规则"""
        indices = list(range(len(pool)))
        rng.shuffle(indices)
        active_ixs = sorted(indices[:num_active])
        inactive_ixs = sorted(indices[num_active:])
        return cls(
            active=tuple(pool[i] for i in active_ixs),
            inactive=tuple(pool[i] for i in inactive_ixs),
        )

    @property
    def active_kinds(self) -> Tuple[RuleKind, ...]:
        return tuple(r.kind for r in self.active)

    @property
    def inactive_kinds(self) -> Tuple[RuleKind, ...]:
        return tuple(r.kind for r in self.inactive)


class RuleEngine:
    """
    规则判定工具

    所有方法都是静态方法，无状态
    """

    @staticmethod
    def satisfies_all(rules: Sequence[Rule], card: Card, history: Sequence[Card]) -> bool:
        """候选牌是否满足所有规则"""
        return all(rule.check(card, history) for rule in rules)

    @staticmethod
    def count_satisfied(rules: Sequence[Rule], card: Card, history: Sequence[Card]) -> int:
        """候选牌满足的规则数"""
        return sum(1 for rule in rules if rule.check(card, history))

    @staticmethod
    def violated_somewhere(rule: Rule, pile: Sequence[Card]) -> bool:
        """
        牌堆中是否存在一对相邻牌违反该规则

        Args:
            rule: 规则
            pile: 牌堆

        Returns:
            是否至少有一处违反
        """
        return any(
            not rule.check(pile[i + 1], pile[:i + 1])
            for i in range(len(pile) - 1)
        )

    @staticmethod
    def consistent_with(rule: Rule, pile: Sequence[Card]) -> bool:
        """牌堆的每一对相邻牌都满足该规则"""
        return not RuleEngine.violated_somewhere(rule, pile)
