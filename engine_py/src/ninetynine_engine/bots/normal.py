"""
Normal bot: stays off the ceiling and prefers the middle of the range.
"""

from typing import List

from .base import BaseBot
from ..constants import DIFFICULTY_NORMAL
from ..models import BotMove, GameState


class NormalBot(BaseBot):
    """
    Avoids landing exactly on the ceiling.

    Strategy:
    - Drop moves that leave the total on the ceiling
    - Prefer totals inside the comfort range (30-85 by default)
    - Otherwise any move below the ceiling
    """

    difficulty = DIFFICULTY_NORMAL

    def pick_safe_move(self, state: GameState, safe_moves: List[BotMove]) -> BotMove:
        below_ceiling = [m for m in safe_moves if m.new_total < self.ceiling]
        if not below_ceiling:
            return self.pick_random(safe_moves)

        low, high = self.tuning.comfort_range
        comfortable = [m for m in below_ceiling if low <= m.new_total <= high]
        if comfortable:
            return self.pick_random(comfortable)
        return self.pick_random(below_ceiling)
