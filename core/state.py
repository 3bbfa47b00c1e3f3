"""
交互状态机

状态:
- IDLE: 四张候选牌背面朝上，等待第一次输入
- REVEALED: 候选牌翻开，限时等待选择
- RESOLVING: 翻回背面的过渡阶段
- SOLVED: 终态，已选中正确牌

翻牌动画与倒计时都是调度器上的协作任务，每个位置有独立的输入锁
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple
import itertools
import logging
import random

from .cards import Card, cards_to_str
from .config import GameConfig
from .generator import PileGenerator, Puzzle
from .rules import SessionParameters, random_serial
from .scheduler import EPSILON, Scheduler, TaskGen
from .selector import NUM_CHOICES, DecoySelector, RoundState

logger = logging.getLogger(__name__)


class Phase(Enum):
    """交互阶段"""
    IDLE = "idle"              # 背面朝上
    REVEALED = "revealed"      # 正面朝上，限时选择
    RESOLVING = "resolving"    # 翻回中
    SOLVED = "solved"          # 已解出


class EventKind(Enum):
    """对外事件类型"""
    REVEAL = "reveal"
    SUCCESS = "success"
    MISTAKE = "mistake"


class MistakeReason(Enum):
    """失误原因"""
    WRONG_CARD = "wrong_card"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class SessionEvent:
    """
    会话事件

    Attributes:
        kind: 事件类型
        time: 逻辑时间 (秒)
        round_number: 第几轮翻牌 (从 1 开始)
        slot: 相关位置 (选牌事件)
        reason: 失误原因 (MISTAKE 事件)
        cards: 翻开的四张牌 (REVEAL 事件)
    """
    kind: EventKind
    time: float
    round_number: int
    slot: Optional[int] = None
    reason: Optional[MistakeReason] = None
    cards: Tuple[Card, ...] = ()


EventListener = Callable[[SessionEvent], None]


class GameSession:
    """
    一局游戏的交互状态机

    谜题在会话开始时生成一次，之后不再改变；每次翻牌重新抽取候选牌
    """

    _id_counter = itertools.count(1)

    def __init__(
        self,
        puzzle: Puzzle,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        scheduler: Optional[Scheduler] = None,
        selector: Optional[DecoySelector] = None,
        serial: Optional[str] = None,
    ):
        """
        Args:
            puzzle: 已生成的谜题
            config: 游戏配置
            rng: 随机数生成器 (用于候选牌抽取)
            scheduler: 协作式调度器
            selector: 候选牌选择器 (默认按 puzzle 新建)
            serial: 生成参数所用的序列号 (仅用于展示)
        """
        self.session_id = next(GameSession._id_counter)
        self.puzzle = puzzle
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.scheduler = scheduler or Scheduler()
        self.serial = serial

        self._selector = selector or DecoySelector(puzzle, self.rng)

        self._phase = Phase.IDLE
        self._locked = [False] * NUM_CHOICES
        self._round: Optional[RoundState] = None
        self._round_number = 0
        self._revealed_at = 0.0
        self._pending_flips = 0

        self.events: List[SessionEvent] = []
        self._listeners: List[EventListener] = []

        logger.info(f"[Session {self.session_id}] Pile: {cards_to_str(puzzle.pile)}")
        for line in puzzle.params.describe():
            logger.debug(f"[Session {self.session_id}] {line}")
        logger.debug(
            f"[Session {self.session_id}] Active rules: "
            f"{', '.join(k.value for k in puzzle.selection.active_kinds)}"
        )
        logger.debug(
            f"[Session {self.session_id}] Acceptable cards: {cards_to_str(puzzle.acceptable)}"
        )

    @classmethod
    def initial(
        cls,
        serial: Optional[str] = None,
        seed: Optional[int] = None,
        config: Optional[GameConfig] = None,
    ) -> 'GameSession':
        """
        创建新会话: 推导参数 -> 生成谜题 -> 初始化状态机

        Args:
            serial: 序列号 (None 时使用配置中的值，仍为 None 则随机生成)
            seed: 随机种子 (None 时使用配置中的值)
            config: 游戏配置

        Returns:
            处于 IDLE 的会话

        Raises:
            ValueError: 序列号不合法
            GenerationError: 无法生成谜题
        """
        config = config or GameConfig()
        serial = serial if serial is not None else config.serial
        seed = seed if seed is not None else config.seed

        rng = random.Random(seed)
        if serial is None:
            serial = random_serial(rng)

        params = SessionParameters.from_serial(serial)
        puzzle = PileGenerator(params, config, rng).generate()
        return cls(puzzle, config=config, rng=rng, serial=serial.upper())

    # ------------------------------------------------------------------
    # 事件
    # ------------------------------------------------------------------

    def subscribe(self, listener: EventListener):
        """注册事件监听器"""
        self._listeners.append(listener)

    def _emit(
        self,
        kind: EventKind,
        slot: Optional[int] = None,
        reason: Optional[MistakeReason] = None,
        cards: Tuple[Card, ...] = (),
    ) -> SessionEvent:
        event = SessionEvent(
            kind=kind,
            time=self.scheduler.now,
            round_number=self._round_number,
            slot=slot,
            reason=reason,
            cards=cards,
        )
        self.events.append(event)
        for listener in list(self._listeners):
            listener(event)
        return event

    # ------------------------------------------------------------------
    # 输入
    # ------------------------------------------------------------------

    def press(self, slot: int) -> bool:
        """
        按下某个位置

        Args:
            slot: 位置 (0-3)

        Returns:
            输入是否被处理 (锁定位置、过渡阶段和终态下返回 False)

        Raises:
            ValueError: 位置越界
        """
        if not 0 <= slot < NUM_CHOICES:
            raise ValueError(f"Slot out of range: {slot}")

        if self._locked[slot]:
            logger.debug(f"[Session {self.session_id}] Slot {slot + 1} is locked, input ignored")
            return False

        if self._phase == Phase.IDLE:
            self._reveal()
            return True

        if self._phase == Phase.REVEALED:
            if self._round.is_correct(slot):
                logger.info(f"[Session {self.session_id}] Solved with {self._round.correct_card}")
                self._phase = Phase.SOLVED
                self._emit(EventKind.SUCCESS, slot=slot)
            else:
                logger.info(
                    f"[Session {self.session_id}] #{slot + 1}: "
                    f"Bad card {self._round.cards[slot]}"
                )
                self._phase = Phase.RESOLVING
                self._emit(EventKind.MISTAKE, slot=slot, reason=MistakeReason.WRONG_CARD)
            return True

        logger.debug(
            f"[Session {self.session_id}] Input ignored in phase {self._phase.value}"
        )
        return False

    # ------------------------------------------------------------------
    # 调度任务
    # ------------------------------------------------------------------

    def _reveal(self):
        """抽取新一轮候选牌并翻开"""
        self._round = self._selector.draw()
        self._round_number += 1
        self._revealed_at = self.scheduler.now

        for i, card in enumerate(self._round.cards):
            logger.info(f"[Session {self.session_id}] Card #{i + 1} = {card}")

        self._phase = Phase.REVEALED
        self._emit(EventKind.REVEAL, cards=self._round.cards)

        for i in range(NUM_CHOICES):
            self.scheduler.spawn(self._flip_card(i, face_up=True), name=f"flip-up-{i}")
        self.scheduler.spawn(self._countdown(), name=f"countdown-{self._round_number}")

    def _countdown(self) -> TaskGen:
        """限时等待选择，超时计为一次失误，然后翻回背面"""
        deadline = self._revealed_at + self.config.timeout
        while self._phase == Phase.REVEALED:
            remaining = deadline - self.scheduler.now
            if remaining <= EPSILON:
                break
            # 最后一次等待截到截止时刻
            yield min(self.config.poll_interval, remaining)

        if self._phase == Phase.SOLVED:
            return

        if self._phase == Phase.REVEALED:
            logger.info(
                f"[Session {self.session_id}] Failure to play within {self.config.timeout:g} seconds"
            )
            self._emit(EventKind.MISTAKE, reason=MistakeReason.TIMEOUT)

        self._phase = Phase.RESOLVING
        self._pending_flips = NUM_CHOICES
        for i in range(NUM_CHOICES):
            self.scheduler.spawn(self._flip_card(i, face_up=False), name=f"flip-down-{i}")

    def _flip_card(self, index: int, face_up: bool) -> TaskGen:
        """单张牌的翻转，期间锁定该位置"""
        # 等待该位置上一次翻转结束
        while self._locked[index]:
            yield None

        self._locked[index] = True
        delay = self.config.flip_stagger * index
        if delay > 0:
            yield delay
        yield self.config.flip_duration
        self._locked[index] = False

        if not face_up:
            self._pending_flips -= 1
            if self._pending_flips == 0:
                self._phase = Phase.IDLE
                logger.debug(f"[Session {self.session_id}] Cards face down again")

    # ------------------------------------------------------------------
    # 时钟
    # ------------------------------------------------------------------

    def tick(self, dt: Optional[float] = None):
        """推进调度器 (默认步长为 config.tick_interval)"""
        self.scheduler.tick(self.config.tick_interval if dt is None else dt)

    def settle(self, limit: float = 10.0) -> bool:
        """
        推进直到所有位置解锁

        Returns:
            是否在时限内全部解锁
        """
        return self.scheduler.run_until(
            lambda: not any(self._locked),
            dt=self.config.tick_interval,
            limit=limit,
        )

    # ------------------------------------------------------------------
    # 只读状态
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def round_state(self) -> Optional[RoundState]:
        """最近一轮的候选牌"""
        return self._round

    @property
    def round_number(self) -> int:
        return self._round_number

    @property
    def locked(self) -> Tuple[bool, ...]:
        return tuple(self._locked)

    @property
    def visible_cards(self) -> Optional[Tuple[Card, ...]]:
        """当前朝上的候选牌 (IDLE 时为 None)"""
        if self._phase == Phase.IDLE or self._round is None:
            return None
        return self._round.cards

    @property
    def time_left(self) -> float:
        """REVEALED 阶段剩余时间"""
        if self._phase != Phase.REVEALED:
            return 0.0
        elapsed = self.scheduler.now - self._revealed_at
        return max(0.0, self.config.timeout - elapsed)

    @property
    def mistakes(self) -> int:
        return sum(1 for e in self.events if e.kind == EventKind.MISTAKE)

    @property
    def is_solved(self) -> bool:
        return self._phase == Phase.SOLVED
