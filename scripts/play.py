#!/usr/bin/env python3
"""
对局脚本

Usage:
    python scripts/play.py --mode watch            # 观看推理智能体解题
    python scripts/play.py --mode play             # 在终端中自己解题
    python scripts/play.py --mode play --serial AB1CD2 --show-rules
"""
import argparse
import logging
import sys
from pathlib import Path
import time

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core.cards import cards_to_str
from core.commands import CommandBridge
from core.config import GameConfig
from core.generator import GenerationError
from core.state import EventKind, GameSession, MistakeReason, Phase, SessionEvent
from env import PointOfOrderEnv
from evaluation import RandomAgent, RuleInferenceAgent

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Point of Order")

    parser.add_argument(
        "--mode",
        type=str,
        default="watch",
        choices=["watch", "play"],
        help="Mode: watch an agent or play yourself",
    )
    parser.add_argument(
        "--agent",
        type=str,
        default="inference",
        choices=["inference", "random"],
        help="Agent used in watch mode",
    )
    parser.add_argument("--serial", type=str, help="Serial number (random if omitted)")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--config", type=str, help="JSON config file")
    parser.add_argument("--delay", type=float, default=0.1, help="Delay between steps")
    parser.add_argument("--games", type=int, default=1, help="Number of games")
    parser.add_argument("--show-rules", action="store_true", help="Print the rule manual")
    parser.add_argument("--debug", action="store_true", help="Debug logging")

    return parser.parse_args()


def load_config(args) -> GameConfig:
    config = GameConfig.from_json(args.config) if args.config else GameConfig()
    if args.serial:
        config.serial = args.serial
    if args.seed is not None:
        config.seed = args.seed
    return config.validate()


def print_event(event: SessionEvent):
    """打印会话事件"""
    if event.kind == EventKind.REVEAL:
        slots = "  ".join(f"{i + 1}:{card}" for i, card in enumerate(event.cards))
        print(f"\n翻开: {slots}")
    elif event.kind == EventKind.SUCCESS:
        print("\n正确! 谜题已解出")
    elif event.kind == EventKind.MISTAKE:
        reason = "超时" if event.reason == MistakeReason.TIMEOUT else f"选错了第 {event.slot + 1} 张"
        print(f"\n失误: {reason}")


def print_rules(session: GameSession):
    for line in session.puzzle.params.describe():
        print(f"  {line}")


def watch_game(args):
    """观看智能体解题"""
    config = load_config(args)
    env = PointOfOrderEnv(
        render_mode="ansi",
        serial=config.serial,
        config=config,
        seed=config.seed,
    )
    agent = RuleInferenceAgent() if args.agent == "inference" else RandomAgent(seed=args.seed)

    for game_idx in range(args.games):
        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}")
        print("=" * 60)

        agent.reset()
        obs, info = env.reset()
        if args.show_rules:
            print_rules(env.session)

        done = False
        last_phase = None
        while not done:
            if info["phase"] != last_phase:
                print(env.render())
                last_phase = info["phase"]

            action = agent.act(obs, info)
            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
            time.sleep(args.delay)

        print(env.render())
        print(f"Solved: {terminated}  Mistakes: {info['mistakes']}  Steps: {info['step_count']}")


def play_game(args):
    """终端交互解题: 输入 1-4 按下位置，或 "play <点数> of <花色>" 命令，q 退出"""
    config = load_config(args)

    for game_idx in range(args.games):
        try:
            session = GameSession.initial(config=config)
        except (ValueError, GenerationError) as e:
            logger.error(f"Cannot start game: {e}")
            sys.exit(1)

        bridge = CommandBridge(session)
        session.subscribe(print_event)

        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}  Serial: {session.serial}")
        print(f"牌堆: {cards_to_str(session.puzzle.pile)}")
        if args.show_rules:
            print_rules(session)
        print(f"翻牌后需在 {config.timeout:g} 秒内选择")
        print("=" * 60)

        last = time.monotonic()
        while not session.is_solved:
            text = input("\n> ").strip()

            # 用真实经过的时间推进逻辑时钟
            now = time.monotonic()
            session.scheduler.run_for(now - last, dt=config.tick_interval)
            last = now

            if text.lower() in ("q", "quit"):
                print("退出游戏")
                return

            if text.isdigit():
                try:
                    if not session.press(int(text) - 1):
                        print(f"(忽略: {session.phase.value})")
                except ValueError as e:
                    print(e)
            elif text:
                if bridge.submit(text):
                    session.settle()
                    session.tick()
                    last = time.monotonic()
                else:
                    print("(无法识别的命令)")

            if session.phase == Phase.REVEALED:
                print(f"剩余 {session.time_left:.1f} 秒")

        print(f"\n用时 {session.scheduler.now:.1f} 秒，失误 {session.mistakes} 次")


def main():
    args = parse_args()
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    print("=" * 60)
    print("Point of Order")
    print("=" * 60)

    if args.mode == "watch":
        watch_game(args)
    elif args.mode == "play":
        play_game(args)


if __name__ == "__main__":
    main()
