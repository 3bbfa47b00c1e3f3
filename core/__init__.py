"""
Core Layer - 纯游戏逻辑 (无 gym 依赖)

Modules:
    cards: 牌定义与编码
    rules: 规则与会话参数
    generator: 牌堆回溯生成
    selector: 候选牌抽取
    scheduler: 协作式调度器
    state: 交互状态机
    commands: 外部命令通道
    config: 游戏配置
"""
from .cards import (
    Card,
    Rank,
    Suit,
    ALL_CARDS,
    RANK_TO_STR,
    SUIT_TO_STR,
    cards_to_array,
    array_to_cards,
    cards_to_str,
    str_to_card,
    random_card,
)

from .rules import (
    NUM_ACTIVE_RULES,
    RuleKind,
    Rule,
    SuitTransitionRule,
    DivisibilityRule,
    RankDistanceRule,
    SessionParameters,
    RuleSelection,
    RuleEngine,
    build_rule_pool,
    random_serial,
)

from .config import GameConfig

from .generator import (
    PILE_SIZE,
    MIN_DECOYS,
    MAX_ACCEPTABLE,
    GenerationError,
    Puzzle,
    PileGenerator,
)

from .selector import NUM_CHOICES, RoundState, DecoySelector

from .scheduler import Scheduler, Task

from .state import (
    Phase,
    EventKind,
    MistakeReason,
    SessionEvent,
    GameSession,
)

from .commands import PlayCommand, CommandBridge, parse_command

__all__ = [
    # cards
    "Card",
    "Rank",
    "Suit",
    "ALL_CARDS",
    "RANK_TO_STR",
    "SUIT_TO_STR",
    "cards_to_array",
    "array_to_cards",
    "cards_to_str",
    "str_to_card",
    "random_card",
    # rules
    "NUM_ACTIVE_RULES",
    "RuleKind",
    "Rule",
    "SuitTransitionRule",
    "DivisibilityRule",
    "RankDistanceRule",
    "SessionParameters",
    "RuleSelection",
    "RuleEngine",
    "build_rule_pool",
    "random_serial",
    # config
    "GameConfig",
    # generator
    "PILE_SIZE",
    "MIN_DECOYS",
    "MAX_ACCEPTABLE",
    "GenerationError",
    "Puzzle",
    "PileGenerator",
    # selector
    "NUM_CHOICES",
    "RoundState",
    "DecoySelector",
    # scheduler
    "Scheduler",
    "Task",
    # state
    "Phase",
    "EventKind",
    "MistakeReason",
    "SessionEvent",
    "GameSession",
    # commands
    "PlayCommand",
    "CommandBridge",
    "parse_command",
]
