"""
外部命令通道

命令格式: "play <点数列表> of <花色列表>"，列表以 "/" 分隔，如:
    play 2/4/jack of spades/h

仅在 IDLE 时有效: 翻牌，等待翻转结束，若有候选牌的点数和花色都在列表中则选中它，
否则不做选择 (由超时处理)。格式错误或无法识别的词直接忽略
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional
import logging
import re

from .cards import Card, Rank, Suit
from .scheduler import TaskGen
from .state import GameSession, Phase

logger = logging.getLogger(__name__)


RANK_WORDS: Dict[str, Rank] = {
    "a": Rank.ACE, "ace": Rank.ACE, "1": Rank.ACE,
    "2": Rank.TWO, "two": Rank.TWO,
    "3": Rank.THREE, "three": Rank.THREE,
    "4": Rank.FOUR, "four": Rank.FOUR,
    "5": Rank.FIVE, "five": Rank.FIVE,
    "6": Rank.SIX, "six": Rank.SIX,
    "7": Rank.SEVEN, "seven": Rank.SEVEN,
    "8": Rank.EIGHT, "eight": Rank.EIGHT,
    "9": Rank.NINE, "nine": Rank.NINE,
    "10": Rank.TEN, "t": Rank.TEN, "ten": Rank.TEN,
    "j": Rank.JACK, "jack": Rank.JACK,
    "q": Rank.QUEEN, "queen": Rank.QUEEN,
    "k": Rank.KING, "king": Rank.KING,
}

SUIT_WORDS: Dict[str, Suit] = {
    "s": Suit.SPADES, "spade": Suit.SPADES, "spades": Suit.SPADES, "♠": Suit.SPADES,
    "h": Suit.HEARTS, "heart": Suit.HEARTS, "hearts": Suit.HEARTS, "♥": Suit.HEARTS,
    "c": Suit.CLUBS, "club": Suit.CLUBS, "clubs": Suit.CLUBS, "♣": Suit.CLUBS,
    "d": Suit.DIAMONDS, "diamond": Suit.DIAMONDS, "diamonds": Suit.DIAMONDS, "♦": Suit.DIAMONDS,
}

COMMAND_PATTERN = re.compile(r"^\s*play\s+(\S+)\s+of\s+(\S+)\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class PlayCommand:
    """
    解析后的出牌命令

    Attributes:
        ranks: 可接受的点数
        suits: 可接受的花色
    """
    ranks: FrozenSet[Rank]
    suits: FrozenSet[Suit]

    def matches(self, card: Card) -> bool:
        return card.rank in self.ranks and card.suit in self.suits


def _parse_tokens(text: str, vocabulary: Dict) -> Optional[FrozenSet]:
    tokens = text.lower().split("/")
    if any(t not in vocabulary for t in tokens):
        return None
    return frozenset(vocabulary[t] for t in tokens)


def parse_command(text: str) -> Optional[PlayCommand]:
    """
    解析命令文本

    Args:
        text: 如 "play 2/4/j of spades/hearts"

    Returns:
        命令，格式错误或含未知词时返回 None
    """
    match = COMMAND_PATTERN.match(text)
    if match is None:
        return None

    ranks = _parse_tokens(match.group(1), RANK_WORDS)
    suits = _parse_tokens(match.group(2), SUIT_WORDS)
    if ranks is None or suits is None:
        return None
    return PlayCommand(ranks=ranks, suits=suits)


class CommandBridge:
    """把文本命令转换为会话上的翻牌与选牌"""

    def __init__(self, session: GameSession):
        self.session = session

    def submit(self, text: str) -> bool:
        """
        提交命令

        Args:
            text: 命令文本

        Returns:
            命令是否被接受 (无法解析或不在 IDLE 时返回 False)
        """
        command = parse_command(text)
        if command is None:
            logger.debug(f"Ignoring unrecognized command: {text!r}")
            return False

        if self.session.phase != Phase.IDLE:
            logger.debug(f"Ignoring command outside idle phase: {text!r}")
            return False

        self.session.scheduler.spawn(self._play(command), name="command")
        return True

    def _play(self, command: PlayCommand) -> TaskGen:
        session = self.session
        session.press(0)

        while any(session.locked):
            yield None

        if session.phase != Phase.REVEALED:
            return

        for slot, card in enumerate(session.round_state.cards):
            if command.matches(card):
                session.press(slot)
                return

        logger.info(f"[Session {session.session_id}] No revealed card matches the command")
