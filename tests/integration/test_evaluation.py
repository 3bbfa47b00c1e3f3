"""评估器集成测试"""
import random

import pytest

from core.generator import PileGenerator
from core.rules import SessionParameters
from env import PointOfOrderEnv
from evaluation import EvalResult, Evaluator, RandomAgent, RuleInferenceAgent


class TestRuleInference:
    """规则推理"""

    @pytest.mark.parametrize("serial", ["AB1CD2", "113ZX5", "KT7QR0"])
    @pytest.mark.parametrize("seed", range(4))
    def test_infers_active_rules(self, serial, seed):
        params = SessionParameters.from_serial(serial)
        puzzle = PileGenerator(params, rng=random.Random(seed)).generate()

        rules = RuleInferenceAgent.infer_rules(serial, puzzle.pile)
        assert set(rules) == set(puzzle.active_rules)


class TestEvaluator:
    """Evaluator 测试"""

    def test_inference_agent_always_first_try(self):
        evaluator = Evaluator(lambda: PointOfOrderEnv(seed=0))
        result = evaluator.evaluate(RuleInferenceAgent(), n_games=20)

        assert isinstance(result, EvalResult)
        assert result.games_played == 20
        assert result.solve_rate == 1.0
        assert result.first_try_rate == 1.0
        assert result.avg_mistakes == 0.0
        assert result.avg_reward == 1.0

    def test_random_agent(self):
        evaluator = Evaluator(lambda: PointOfOrderEnv(seed=1, max_episode_steps=200))
        result = evaluator.evaluate(RandomAgent(seed=1), n_games=5)

        assert result.games_played == 5
        assert 0.0 <= result.solve_rate <= 1.0
        assert 0 < result.avg_length <= 200

    def test_zero_games(self):
        evaluator = Evaluator(lambda: PointOfOrderEnv(seed=0))
        result = evaluator.evaluate(RandomAgent(seed=0), n_games=0)
        assert result.solve_rate == 0.0
        assert result.games_played == 0

    def test_result_to_dict(self):
        result = EvalResult(
            solve_rate=0.5,
            avg_mistakes=1.0,
            avg_reward=0.0,
            avg_length=30.0,
            games_played=2,
        )
        d = result.to_dict()
        assert d["solve_rate"] == 0.5
        assert d["first_try_rate"] == 0.0
        assert "50.00%" in repr(result)
