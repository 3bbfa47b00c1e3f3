"""规则引擎测试"""
import random

import pytest

from core.cards import Card, Rank, Suit
from core.rules import (
    DivisibilityRule,
    RankDistanceRule,
    RuleEngine,
    RuleKind,
    RuleSelection,
    SessionParameters,
    SuitTransitionRule,
    build_rule_pool,
    random_serial,
    validate_serial,
)

S, H, C, D = Suit.SPADES, Suit.HEARTS, Suit.CLUBS, Suit.DIAMONDS


def make_params(modulus: int = 3, difference: int = 2, serial: str = "AB1CD2") -> SessionParameters:
    base = SessionParameters.from_serial(serial)
    return SessionParameters(
        allowed_suits=base.allowed_suits,
        modulus=modulus,
        difference=difference,
    )


class TestSessionParameters:
    """序列号 -> 会话参数测试"""

    def test_letter_letter_table(self):
        params = SessionParameters.from_serial("AB1CD2")
        assert params.allowed_suits[S] == {S, H}
        assert params.allowed_suits[H] == {H, C}
        assert params.allowed_suits[C] == {C, D}
        assert params.allowed_suits[D] == {D, S}

    def test_letter_digit_table(self):
        params = SessionParameters.from_serial("A11CD2")
        assert params.allowed_suits[S] == {S, D}
        assert params.allowed_suits[H] == {H, S}
        assert params.allowed_suits[C] == {C, H}
        assert params.allowed_suits[D] == {D, C}

    def test_digit_letter_table(self):
        params = SessionParameters.from_serial("1B1CD2")
        assert params.allowed_suits[S] == {H, C}
        assert params.allowed_suits[H] == {C, D}
        assert params.allowed_suits[C] == {D, S}
        assert params.allowed_suits[D] == {S, H}

    def test_digit_digit_table(self):
        params = SessionParameters.from_serial("111CD2")
        assert params.allowed_suits[S] == {D, C}
        assert params.allowed_suits[H] == {S, D}
        assert params.allowed_suits[C] == {H, S}
        assert params.allowed_suits[D] == {C, H}

    def test_modulus_mapping(self):
        # ((c - 'A' + 1) % 3) + 3
        assert SessionParameters.from_serial("AB1AD2").modulus == 4   # A -> 1
        assert SessionParameters.from_serial("AB1BD2").modulus == 5   # B -> 2
        assert SessionParameters.from_serial("AB1CD2").modulus == 3   # C -> 0
        assert SessionParameters.from_serial("AB1ZD2").modulus == 5   # Z -> 26 % 3 = 2

    def test_difference_mapping(self):
        # ((c - 'A' + 1) % 3) + 2
        assert SessionParameters.from_serial("AB1CA2").difference == 3
        assert SessionParameters.from_serial("AB1CB2").difference == 4
        assert SessionParameters.from_serial("AB1CC2").difference == 2

    def test_lowercase_serial(self):
        assert SessionParameters.from_serial("ab1cd2") == SessionParameters.from_serial("AB1CD2")

    def test_describe(self):
        lines = SessionParameters.from_serial("AB1CD2").describe()
        assert len(lines) == 3
        assert "divisible by 3" in lines[1]
        assert "3 or 4" in lines[2]


class TestSerialValidation:
    """序列号校验测试"""

    @pytest.mark.parametrize("serial", ["AB1C", "", "AB1C-2", "AB12D2", "AB1C52"])
    def test_invalid(self, serial):
        with pytest.raises(ValueError):
            validate_serial(serial)

    def test_valid_returns_upper(self):
        assert validate_serial("ab1cd2") == "AB1CD2"

    def test_random_serial_is_valid(self):
        rng = random.Random(7)
        for _ in range(50):
            serial = random_serial(rng)
            assert len(serial) == 6
            assert validate_serial(serial) == serial
            assert serial[2].isdigit() and serial[5].isdigit()


class TestSuitTransitionRule:
    """花色转移规则测试"""

    def test_allowed(self):
        rule = SuitTransitionRule(SessionParameters.from_serial("AB1CD2").allowed_suits)
        last = Card(Rank.FIVE, S)
        assert rule.check(Card(Rank.NINE, S), [last])
        assert rule.check(Card(Rank.NINE, H), [last])
        assert not rule.check(Card(Rank.NINE, C), [last])
        assert not rule.check(Card(Rank.NINE, D), [last])

    def test_only_last_card_matters(self):
        rule = SuitTransitionRule(SessionParameters.from_serial("AB1CD2").allowed_suits)
        history = [Card(Rank.ACE, C), Card(Rank.TWO, S)]
        assert rule.check(Card(Rank.THREE, H), history)

    def test_empty_history(self):
        rule = SuitTransitionRule(SessionParameters.from_serial("AB1CD2").allowed_suits)
        assert rule.check(Card(Rank.ACE, D), [])
        assert rule.kind == RuleKind.SUIT_TRANSITION


class TestDivisibilityRule:
    """整除交替规则测试"""

    def test_alternation(self):
        rule = DivisibilityRule(3)
        three = Card(Rank.THREE, S)   # 3 能被 3 整除
        four = Card(Rank.FOUR, S)     # 4 不能
        six = Card(Rank.SIX, H)       # 6 能
        assert rule.check(three, [four])
        assert rule.check(four, [three])
        assert not rule.check(six, [three])
        assert not rule.check(Card(Rank.FIVE, H), [four])

    def test_ace_counts_as_one(self):
        rule = DivisibilityRule(4)
        assert not rule.is_divisible(Card(Rank.ACE, S))
        assert rule.is_divisible(Card(Rank.FOUR, S))
        assert rule.is_divisible(Card(Rank.QUEEN, S))


class TestRankDistanceRule:
    """点数距离规则测试"""

    def test_forward_and_backward(self):
        rule = RankDistanceRule(2)
        last = Card(Rank.SIX, S)  # rank 5
        assert rule.check(Card(Rank.EIGHT, S), [last])   # +2
        assert rule.check(Card(Rank.NINE, S), [last])    # +3
        assert rule.check(Card(Rank.FOUR, S), [last])    # -2
        assert rule.check(Card(Rank.THREE, S), [last])   # -3
        assert not rule.check(Card(Rank.SEVEN, S), [last])
        assert not rule.check(Card(Rank.TEN, S), [last])
        assert not rule.check(Card(Rank.SIX, H), [last])

    def test_wraparound(self):
        rule = RankDistanceRule(4)
        last = Card(Rank.QUEEN, S)  # rank 11
        assert rule.check(Card(Rank.THREE, S), [last])   # (11 + 4) % 13 = 2
        assert rule.check(Card(Rank.FOUR, S), [last])    # (11 + 5) % 13 = 3
        assert rule.check(Card(Rank.FOUR, S), [Card(Rank.KING, S)])  # (12 + 4) % 13 = 3
        assert rule.check(Card(Rank.KING, S), [Card(Rank.FOUR, S)])  # 3 - 4 -> 12


class TestRulePool:
    """规则池与规则划分测试"""

    def test_pool_order(self):
        pool = build_rule_pool(make_params())
        assert [r.kind for r in pool] == [
            RuleKind.SUIT_TRANSITION,
            RuleKind.DIVISIBILITY,
            RuleKind.RANK_DISTANCE,
        ]

    def test_pool_carries_parameters(self):
        pool = build_rule_pool(make_params(modulus=5, difference=4))
        assert pool[1].modulus == 5
        assert pool[2].difference == 4

    def test_selection_partition(self):
        pool = build_rule_pool(make_params())
        rng = random.Random(3)
        for _ in range(20):
            selection = RuleSelection.draw(pool, rng)
            assert len(selection.active) == 2
            assert len(selection.inactive) == 1
            assert set(selection.active) | set(selection.inactive) == set(pool)

    def test_selection_covers_all_pairs(self):
        pool = build_rule_pool(make_params())
        rng = random.Random(11)
        seen = {RuleSelection.draw(pool, rng).inactive_kinds for _ in range(100)}
        assert len(seen) == 3


class TestRuleEngine:
    """RuleEngine 测试"""

    def test_scenario_suit_and_divisibility(self):
        # m=3, d=2，生效规则为花色转移与整除交替
        params = make_params(modulus=3, difference=2)
        pool = build_rule_pool(params)
        active = (pool[0], pool[1])

        last = Card(Rank.FOUR, S)       # rank 3: (3 + 1) % 3 != 0
        good = Card(Rank.THREE, H)      # rank 2: (2 + 1) % 3 == 0，♠ -> ♥ 允许
        bad_suit = Card(Rank.THREE, C)  # ♠ -> ♣ 不允许

        assert RuleEngine.satisfies_all(active, good, [last])
        assert not RuleEngine.satisfies_all(active, bad_suit, [last])
        for rank in Rank:
            assert not RuleEngine.satisfies_all(active, Card(rank, C), [last])

    def test_count_satisfied(self):
        pool = build_rule_pool(make_params(modulus=3, difference=2))
        last = Card(Rank.FOUR, S)
        assert RuleEngine.count_satisfied(pool[:2], Card(Rank.THREE, H), [last]) == 2
        assert RuleEngine.count_satisfied(pool[:2], Card(Rank.THREE, C), [last]) == 1
        assert RuleEngine.count_satisfied(pool[:2], Card(Rank.FIVE, C), [last]) == 0

    def test_violated_somewhere(self):
        rule = DivisibilityRule(3)
        consistent = [Card(Rank.THREE, S), Card(Rank.FOUR, S), Card(Rank.SIX, S)]
        assert not RuleEngine.violated_somewhere(rule, consistent)
        assert RuleEngine.consistent_with(rule, consistent)

        broken = consistent + [Card(Rank.NINE, S)]
        assert RuleEngine.violated_somewhere(rule, broken)
        assert not RuleEngine.consistent_with(rule, broken)

    def test_single_card_pile_is_consistent(self):
        rule = RankDistanceRule(3)
        assert RuleEngine.consistent_with(rule, [Card(Rank.ACE, S)])
