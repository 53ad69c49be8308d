"""
In-memory store of active game rooms.
"""

import logging
import random
import string
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .engine import NinetyNineEngine
from .rules import BotTuning, RuleConfig
from .scheduler import BotScheduler

logger = logging.getLogger(__name__)

ROOM_ID_LENGTH = 6
ROOM_ID_ALPHABET = string.ascii_uppercase + string.digits


@dataclass
class Room:
    id: str
    engine: NinetyNineEngine
    scheduler: BotScheduler
    host_id: Optional[str] = None
    created_at: float = field(default_factory=time.time)
    log_buffer: List[str] = field(default_factory=list)

    def drain_logs(self) -> List[str]:
        """Return and clear narration lines gathered since the last call."""
        lines = list(self.log_buffer)
        self.log_buffer.clear()
        return lines

    def human_seat_ids(self) -> List[str]:
        return [s.id for s in self.engine.state.seats if not s.is_bot]


class GameStore:
    """
    Owns every room of a server process.

    Rooms are created and evicted explicitly. Optional hooks are called
    after a room is created and after it has been evicted.
    """

    def __init__(
        self,
        rules: Optional[RuleConfig] = None,
        tuning: Optional[BotTuning] = None,
        seed: Optional[int] = None,
        on_create: Optional[Callable[[Room], None]] = None,
        on_evict: Optional[Callable[[Room], None]] = None
    ):
        self.rules = rules
        self.tuning = tuning
        self.rng = random.Random(seed)
        self.on_create = on_create
        self.on_evict = on_evict
        self._rooms: Dict[str, Room] = {}

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def _generate_room_id(self) -> str:
        while True:
            room_id = ''.join(self.rng.choice(ROOM_ID_ALPHABET) for _ in range(ROOM_ID_LENGTH))
            if room_id not in self._rooms:
                return room_id

    def create_room(self, room_id: Optional[str] = None, host_id: Optional[str] = None) -> Room:
        """Create a room with its own engine and bot scheduler."""
        room_id = room_id or self._generate_room_id()
        if room_id in self._rooms:
            return self._rooms[room_id]

        engine = NinetyNineEngine(
            room_id=room_id,
            rules=self.rules,
            rng=random.Random(self.rng.getrandbits(64)),
            tuning=self.tuning
        )
        scheduler = BotScheduler(engine, rng=random.Random(self.rng.getrandbits(64)))
        room = Room(id=room_id, engine=engine, scheduler=scheduler, host_id=host_id)
        engine.subscribe(on_log=room.log_buffer.append)
        self._rooms[room_id] = room
        logger.info(f"Room {room_id} created")
        if self.on_create:
            self.on_create(room)
        return room

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def find_room_for_seat(self, seat_id: str) -> Optional[Room]:
        for room in self._rooms.values():
            if room.engine.state.get_seat(seat_id):
                return room
        return None

    def evict_room(self, room_id: str) -> bool:
        """Cancel a room's pending bot move and forget the room."""
        room = self._rooms.pop(room_id, None)
        if room is None:
            return False
        room.scheduler.cancel()
        logger.info(f"Room {room_id} evicted")
        if self.on_evict:
            self.on_evict(room)
        return True
