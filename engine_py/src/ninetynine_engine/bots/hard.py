"""
Hard bot implementation with band-based heuristics.
"""

from typing import List, Optional

from .base import BaseBot
from ..constants import DIFFICULTY_HARD, DIRECTION_CHANGE, FACE_JACK, FACE_ZERO
from ..models import BotMove, GameState


class HardBot(BaseBot):
    """
    Bot that plays by bands of the current total.

    Strategy:
    - Below 50: build with the biggest plain card that stays at or under 85
    - 50-79: plain cards that keep the total within 50-89
    - 80-89: small plain cards, then specials that lower the total
    - 90 and up: escape below 90 as far as possible, or stall with a 0
    - Two seats left: sometimes set the total to the ceiling with the J to squeeze
      the opponent
    - Hold special cards back while plain cards do the job

    Every threshold and probability comes from BotTuning.
    """

    difficulty = DIFFICULTY_HARD

    def pick_safe_move(self, state: GameState, safe_moves: List[BotMove]) -> BotMove:
        current = state.current_total
        tuning = self.tuning
        plain = [m for m in safe_moves if not m.is_special]
        special = [m for m in safe_moves if m.is_special]
        endgame = self.is_endgame(state)

        if current < tuning.build_below:
            building = sorted(
                (m for m in plain if current < m.new_total <= tuning.build_cap),
                key=lambda m: m.new_total,
                reverse=True
            )
            if building:
                return self.pick_random(building[:2])

        elif current < tuning.steady_below:
            low, high = tuning.steady_range
            steady = [m for m in plain if low <= m.new_total <= high]
            if steady:
                return self.pick_random(steady)

        elif current < tuning.caution_below:
            small = [m for m in plain if m.new_total <= tuning.caution_cap and m.new_total < self.ceiling]
            if small:
                return self.pick_random(small)
            lowering = [m for m in special if m.new_total < current]
            if lowering:
                return self.pick_random(lowering)

        if current >= tuning.escape_below:
            move = self._critical_move(state, safe_moves, endgame)
            if move:
                return move

        if endgame and current < tuning.early_pressure_below:
            pressure = self._pressure_move(safe_moves)
            if pressure and self.rng.random() < tuning.early_pressure_chance:
                return pressure

        below_ceiling = [m for m in safe_moves if m.new_total < self.ceiling]
        if below_ceiling:
            low, high = tuning.fallback_range
            comfortable = [m for m in below_ceiling if low <= m.new_total <= high]
            if comfortable:
                return self.pick_random(comfortable)
            return self.pick_random(below_ceiling)
        return self.pick_random(safe_moves)

    def _critical_move(self, state: GameState, safe_moves: List[BotMove], endgame: bool) -> Optional[BotMove]:
        """Close to the ceiling: get out, squeeze, or stall."""
        current = state.current_total
        escapes = sorted(
            (m for m in safe_moves if m.new_total < self.tuning.escape_below),
            key=lambda m: m.new_total
        )
        if escapes:
            if endgame and current < self.ceiling:
                pressure = self._pressure_move(safe_moves)
                if pressure and self.rng.random() < self.tuning.endgame_pressure_chance:
                    return pressure
            return escapes[0]

        zeros = [m for m in safe_moves if m.face == FACE_ZERO]
        if zeros:
            if self.rng.random() < 0.5:
                reverse = next((m for m in zeros if m.options.get('direction') == DIRECTION_CHANGE), None)
                return reverse or zeros[0]
            return zeros[0]
        return None

    def _pressure_move(self, safe_moves: List[BotMove]) -> Optional[BotMove]:
        """The J played to set the total to exactly the ceiling."""
        return next(
            (m for m in safe_moves if m.face == FACE_JACK and m.new_total == self.ceiling),
            None
        )
