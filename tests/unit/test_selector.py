"""候选牌选择测试"""
from collections import Counter
import random

import pytest

from core.generator import PileGenerator
from core.rules import RuleEngine, SessionParameters
from core.selector import NUM_CHOICES, DecoySelector, RoundState


@pytest.fixture(scope="module")
def puzzle():
    params = SessionParameters.from_serial("AB1CD2")
    return PileGenerator(params, rng=random.Random(5)).generate()


class TestRoundState:
    """RoundState 测试"""

    def test_correct_card(self, puzzle):
        cards = (puzzle.decoys[0], puzzle.decoys[1], puzzle.acceptable[0], puzzle.decoys[2])
        state = RoundState(cards=cards, correct_index=2)
        assert state.correct_card == puzzle.acceptable[0]
        assert state.is_correct(2)
        assert not state.is_correct(0)


class TestDecoySelector:
    """DecoySelector 测试"""

    def test_four_distinct_cards(self, puzzle):
        selector = DecoySelector(puzzle, random.Random(0))
        for _ in range(50):
            state = selector.draw()
            assert len(state.cards) == NUM_CHOICES
            assert len(set(state.cards)) == NUM_CHOICES

    def test_correct_from_acceptable(self, puzzle):
        selector = DecoySelector(puzzle, random.Random(1))
        for _ in range(50):
            state = selector.draw()
            assert state.correct_card in puzzle.acceptable
            assert RuleEngine.satisfies_all(puzzle.active_rules, state.correct_card, puzzle.pile)

    def test_others_are_decoys(self, puzzle):
        selector = DecoySelector(puzzle, random.Random(2))
        for _ in range(50):
            state = selector.draw()
            others = [c for i, c in enumerate(state.cards) if i != state.correct_index]
            assert len(others) == NUM_CHOICES - 1
            assert all(c in puzzle.decoys for c in others)
            # 干扰牌一定不满足全部生效规则，正确牌唯一
            assert not any(
                RuleEngine.satisfies_all(puzzle.active_rules, c, puzzle.pile) for c in others
            )

    def test_correct_slot_varies(self, puzzle):
        selector = DecoySelector(puzzle, random.Random(3))
        slots = Counter(selector.draw().correct_index for _ in range(200))
        assert set(slots) == set(range(NUM_CHOICES))

    def test_puzzle_unchanged(self, puzzle):
        pile, acceptable, decoys = puzzle.pile, puzzle.acceptable, puzzle.decoys
        selector = DecoySelector(puzzle, random.Random(4))
        for _ in range(20):
            selector.draw()
        assert puzzle.pile == pile
        assert puzzle.acceptable == acceptable
        assert puzzle.decoys == decoys
