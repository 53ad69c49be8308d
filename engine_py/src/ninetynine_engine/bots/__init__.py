"""
Bot seats for the 99 game.
"""

import random
from typing import Optional

from .base import BaseBot, enumerate_moves
from .easy import EasyBot
from .hard import HardBot
from .normal import NormalBot
from ..constants import DIFFICULTY_NORMAL
from ..errors import INVALID_DIFFICULTY, GameError
from ..rules import BotTuning, RuleConfig

BOT_CLASSES = {
    EasyBot.difficulty: EasyBot,
    NormalBot.difficulty: NormalBot,
    HardBot.difficulty: HardBot,
}


def create_bot(
    difficulty: Optional[str],
    seat_id: str,
    rng: Optional[random.Random] = None,
    tuning: Optional[BotTuning] = None,
    rules: Optional[RuleConfig] = None
) -> BaseBot:
    """Create the bot for a difficulty tier (normal when unset)."""
    bot_class = BOT_CLASSES.get(difficulty or DIFFICULTY_NORMAL)
    if bot_class is None:
        raise GameError(INVALID_DIFFICULTY, f"Unknown difficulty: {difficulty}")
    return bot_class(seat_id, rng=rng, tuning=tuning, rules=rules)


__all__ = [
    "BaseBot", "EasyBot", "NormalBot", "HardBot", "create_bot", "enumerate_moves",
]
