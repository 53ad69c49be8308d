"""
Base bot interface and move enumeration.
"""

import random
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, TypeVar

from ..constants import (
    CEILING, DIRECTION_CHANGE, DIRECTION_KEEP, FACE_JACK, FACE_NINE, FACE_TEN, FACE_ZERO,
    signed_values,
)
from ..models import BotMove, Card, GameState, Seat
from ..rules import BotTuning, RuleConfig, default_rules, default_tuning

T = TypeVar('T')


def enumerate_moves(
    hand: Sequence[Card],
    current: int,
    set_targets: Sequence[int],
    ceiling: int = CEILING
) -> List[BotMove]:
    """
    List every resolvable variant of every card in a hand.

    Args:
        hand: Cards the bot holds
        current: Total before the play
        set_targets: Values to consider for the J card
        ceiling: Highest total that is still safe

    Returns:
        Moves in hand order, each carrying the total it would produce
    """
    moves = []
    for card in hand:
        if card.is_normal:
            moves.append(BotMove(card.id, card.face, current + int(card.face), ceiling=ceiling))
        elif card.face in (FACE_NINE, FACE_TEN):
            for value in signed_values(card.face):
                moves.append(BotMove(
                    card.id, card.face, current + value, {'value': value}, True, ceiling
                ))
        elif card.face == FACE_ZERO:
            for direction in (DIRECTION_KEEP, DIRECTION_CHANGE):
                moves.append(BotMove(
                    card.id, card.face, current, {'direction': direction}, True, ceiling
                ))
        elif card.face == FACE_JACK:
            for target in set_targets:
                moves.append(BotMove(card.id, card.face, target, {'value': target}, True, ceiling))
    return moves


class BaseBot(ABC):
    """Abstract base class for bot seats."""

    difficulty: str = ''

    def __init__(
        self,
        seat_id: str,
        rng: Optional[random.Random] = None,
        tuning: Optional[BotTuning] = None,
        rules: Optional[RuleConfig] = None
    ):
        self.seat_id = seat_id
        self.rng = rng or random.Random()
        self.tuning = tuning or default_tuning
        self.rules = rules or default_rules

    @property
    def ceiling(self) -> int:
        return self.rules.ceiling

    def set_targets(self) -> List[int]:
        """J targets from the tuning, clamped into the rules' set-total range."""
        low, high = self.rules.set_total_min, self.rules.set_total_max
        targets = []
        for target in self.tuning.set_targets:
            target = min(max(target, low), high)
            if target not in targets:
                targets.append(target)
        return targets

    def choose_move(self, state: GameState) -> Optional[BotMove]:
        """
        Choose a move for this bot's seat.

        Args:
            state: Live game state (read only)

        Returns:
            A safe move when one exists, otherwise the first enumerated
            move, or None for an empty hand
        """
        seat = self.get_seat(state)
        if seat is None:
            return None
        moves = enumerate_moves(seat.hand, state.current_total, self.set_targets(), self.ceiling)
        if not moves:
            return None
        safe = [m for m in moves if m.is_safe]
        if not safe:
            return moves[0]
        return self.pick_safe_move(state, safe)

    @abstractmethod
    def pick_safe_move(self, state: GameState, safe_moves: List[BotMove]) -> BotMove:
        """Pick one of the non-empty list of safe moves."""
        pass

    def get_seat(self, state: GameState) -> Optional[Seat]:
        return state.get_seat(self.seat_id)

    def is_endgame(self, state: GameState) -> bool:
        """Two seats or fewer still alive."""
        return len(state.alive_seats()) <= 2

    def pick_random(self, items: Sequence[T]) -> T:
        return items[self.rng.randrange(len(items))]
