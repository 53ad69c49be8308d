"""Game models and data structures"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .constants import (
    BOT_IDLE, CEILING, KIND_NORMAL, KIND_SPECIAL, STATUS_WAITING, Face,
)


@dataclass(frozen=True)
class Card:
    id: str
    kind: str  # normal|special
    face: Face  # 1-8, 10 for normal; '9', '10', '0', 'J' for special
    label: str
    description: str = ''

    @property
    def is_special(self) -> bool:
        return self.kind == KIND_SPECIAL

    @property
    def is_normal(self) -> bool:
        return self.kind == KIND_NORMAL


@dataclass
class Seat:
    id: str
    name: str
    seat: int
    hand: List[Card] = field(default_factory=list)
    is_alive: bool = True
    is_bot: bool = False
    difficulty: Optional[str] = None  # easy|normal|hard, bots only

    @property
    def hand_count(self) -> int:
        return len(self.hand)

    def find_card(self, card_id: str) -> Optional[Card]:
        return next((c for c in self.hand if c.id == card_id), None)


@dataclass
class BotMove:
    """One resolvable variant of a card in a bot's hand."""
    card_id: str
    face: Face
    new_total: int
    options: Dict = field(default_factory=dict)
    is_special: bool = False
    ceiling: int = CEILING

    @property
    def is_safe(self) -> bool:
        return 0 <= self.new_total <= self.ceiling


@dataclass
class GameState:
    id: str
    version: int = 0
    status: str = STATUS_WAITING  # waiting|playing|ended
    seats: List[Seat] = field(default_factory=list)
    current_total: int = 0
    direction: int = 1
    turn_index: int = 0
    draw_pile: List[Card] = field(default_factory=list)  # top of pile is the end
    discard_pile: List[Card] = field(default_factory=list)  # last played on top
    winner_id: Optional[str] = None
    game_log: List[str] = field(default_factory=list)
    # UI feedback carried in snapshots
    bot_state: str = BOT_IDLE
    last_played_by: Optional[str] = None
    score_change: int = 0

    def get_seat(self, seat_id: str) -> Optional[Seat]:
        return next((s for s in self.seats if s.id == seat_id), None)

    def seat_index(self, seat_id: str) -> int:
        return next((i for i, s in enumerate(self.seats) if s.id == seat_id), -1)

    def alive_seats(self) -> List[Seat]:
        return [s for s in self.seats if s.is_alive]

    @property
    def current_seat(self) -> Optional[Seat]:
        if 0 <= self.turn_index < len(self.seats):
            return self.seats[self.turn_index]
        return None

    @property
    def last_card(self) -> Optional[Card]:
        return self.discard_pile[-1] if self.discard_pile else None

    def increment_version(self):
        self.version += 1
