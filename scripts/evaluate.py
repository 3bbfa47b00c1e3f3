#!/usr/bin/env python3
"""
评估脚本

Usage:
    python scripts/evaluate.py --agent inference --games 100
    python scripts/evaluate.py --agent random --games 50 --output results.json
"""
import argparse
import logging
import sys
from pathlib import Path
import json

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core.config import GameConfig
from core.generator import GenerationError
from env import make_env
from evaluation import Evaluator, RandomAgent, RuleInferenceAgent

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Point of Order Evaluation")

    parser.add_argument(
        "--agent",
        type=str,
        default="inference",
        choices=["inference", "random"],
        help="Agent to evaluate",
    )
    parser.add_argument("--games", type=int, default=100, help="Number of games")
    parser.add_argument("--serial", type=str, help="Fixed serial number")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--config", type=str, help="JSON config file")
    parser.add_argument("--max-steps", type=int, default=600, help="Max steps per game")
    parser.add_argument("--output", type=str, help="Output file for results")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")

    return parser.parse_args()


def main():
    args = parse_args()

    config = GameConfig.from_json(args.config) if args.config else GameConfig()

    def env_fn():
        return make_env(
            serial=args.serial,
            config=config,
            max_episode_steps=args.max_steps,
            seed=args.seed,
        )

    if args.agent == "inference":
        agent = RuleInferenceAgent()
    else:
        agent = RandomAgent(seed=args.seed)

    logger.info(f"Evaluating agent: {agent.name} ({args.games} games)")

    evaluator = Evaluator(env_fn)
    try:
        result = evaluator.evaluate(agent, n_games=args.games, verbose=args.verbose)
    except (ValueError, GenerationError) as e:
        logger.error(f"Evaluation failed: {e}")
        sys.exit(1)

    logger.info("=" * 50)
    logger.info("Evaluation Results")
    logger.info("=" * 50)
    logger.info(f"Solve Rate: {result.solve_rate:.2%}")
    logger.info(f"First Try Rate: {result.first_try_rate:.2%}")
    logger.info(f"Average Mistakes: {result.avg_mistakes:.2f}")
    logger.info(f"Average Reward: {result.avg_reward:.2f}")
    logger.info(f"Average Length: {result.avg_length:.1f}")
    logger.info("=" * 50)

    if args.output:
        with open(args.output, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        logger.info(f"Results saved to {args.output}")


if __name__ == "__main__":
    main()
