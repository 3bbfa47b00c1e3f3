"""
Evaluation Layer - 评估框架

Modules:
    evaluator: 评估器和智能体
"""
from .evaluator import (
    EvalResult,
    Agent,
    RandomAgent,
    RuleInferenceAgent,
    Evaluator,
)

__all__ = [
    "EvalResult",
    "Agent",
    "RandomAgent",
    "RuleInferenceAgent",
    "Evaluator",
]
