"""
Easy bot: any safe move.
"""

from typing import List

from .base import BaseBot
from ..constants import DIFFICULTY_EASY
from ..models import BotMove, GameState


class EasyBot(BaseBot):
    """Plays a uniformly random safe move."""

    difficulty = DIFFICULTY_EASY

    def pick_safe_move(self, state: GameState, safe_moves: List[BotMove]) -> BotMove:
        return self.pick_random(safe_moves)
