"""Authoritative game engine for 99"""

import logging
import random
import threading
import uuid
from typing import Callable, Dict, List, Optional, Union

from .bots import BaseBot, create_bot
from .constants import (
    BOT_IDLE, DIFFICULTIES, DIFFICULTY_NORMAL, STATUS_ENDED, STATUS_PLAYING, STATUS_WAITING,
)
from .models import BotMove, Card, GameState, Seat
from .rules import BotTuning, RuleConfig, default_rules, default_tuning
from .serialization import ProjectedState, project_state
from .shuffle import draw_card, setup_round
from .validate import PlayOptions, PlayResult, validate_play

logger = logging.getLogger(__name__)

StateListener = Callable[[ProjectedState], None]
LogListener = Callable[[str], None]


class NinetyNineEngine:
    """
    One game of 99.

    Every mutation goes through a method of this class and runs under the
    engine lock, so a play and the turn advance that follows it land as a
    single unit. ``state.version`` goes up by one for each accepted change.
    """

    def __init__(
        self,
        room_id: str = 'local',
        rules: Optional[RuleConfig] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        tuning: Optional[BotTuning] = None
    ):
        self.rules = rules or default_rules
        self.tuning = tuning or default_tuning
        self.rng = rng or random.Random(seed)
        self.state = GameState(id=room_id)
        self._lock = threading.RLock()
        self._bots: Dict[str, BaseBot] = {}
        self._state_listeners: List[StateListener] = []
        self._log_listeners: List[LogListener] = []

    # ------------------------------------------------------------------
    # subscriptions

    def subscribe(self, on_state: Optional[StateListener] = None, on_log: Optional[LogListener] = None):
        """Register callbacks for public snapshots and narration lines."""
        if on_state:
            self._state_listeners.append(on_state)
        if on_log:
            self._log_listeners.append(on_log)

    def _emit_state(self):
        if not self._state_listeners:
            return
        snapshot = project_state(self.state)
        for listener in self._state_listeners:
            listener(snapshot)

    def _log(self, message: str):
        self.state.game_log.append(message)
        logger.info(f"[{self.state.id}] {message}")
        for listener in self._log_listeners:
            listener(message)

    # ------------------------------------------------------------------
    # roster

    def add_seat(self, seat_id: str, name: str, is_bot: bool = False, difficulty: Optional[str] = None) -> bool:
        with self._lock:
            state = self.state
            if state.status != STATUS_WAITING:
                logger.debug(f"[{state.id}] Seat {seat_id} rejected: game already started")
                return False
            if len(state.seats) >= self.rules.max_seats:
                logger.debug(f"[{state.id}] Seat {seat_id} rejected: room is full")
                return False
            if state.get_seat(seat_id):
                logger.debug(f"[{state.id}] Seat {seat_id} rejected: duplicate id")
                return False
            if is_bot:
                difficulty = difficulty or DIFFICULTY_NORMAL
                if difficulty not in DIFFICULTIES:
                    logger.warning(f"[{state.id}] Bot {seat_id} rejected: unknown difficulty {difficulty}")
                    return False
                self._bots[seat_id] = create_bot(
                    difficulty, seat_id, rng=self.rng, tuning=self.tuning, rules=self.rules
                )
            else:
                difficulty = None

            state.seats.append(Seat(
                id=seat_id,
                name=name,
                seat=len(state.seats),
                is_bot=is_bot,
                difficulty=difficulty
            ))
            state.increment_version()
            self._emit_state()
            return True

    def add_bot(self, difficulty: str = DIFFICULTY_NORMAL) -> Optional[str]:
        """Seat a bot with a generated id and name. Returns the id or None."""
        bot_id = f"bot-{uuid.uuid4().hex[:8]}"
        if self.add_seat(bot_id, f"Bot ({difficulty})", is_bot=True, difficulty=difficulty):
            return bot_id
        return None

    def remove_seat(self, seat_id: str) -> bool:
        """
        Remove a seat, typically on disconnect.

        During a round the seat's hand goes to the discard pile. If fewer
        than two seats remain alive the round ends without a winner;
        otherwise the turn moves on as if the seat had never been there.
        """
        with self._lock:
            state = self.state
            index = state.seat_index(seat_id)
            if index == -1:
                return False

            seat = state.seats.pop(index)
            for number, remaining in enumerate(state.seats):
                remaining.seat = number
            self._bots.pop(seat_id, None)
            state.discard_pile.extend(seat.hand)
            seat.hand = []
            self._log(f"{seat.name} left the room.")

            if state.status == STATUS_PLAYING:
                if len(state.alive_seats()) < 2:
                    state.status = STATUS_ENDED
                    self._log("Not enough players, game over")
                elif index < state.turn_index:
                    state.turn_index -= 1
                elif index == state.turn_index:
                    count = len(state.seats)
                    state.turn_index = (index - 1) % count if state.direction == 1 else index % count
                    self._advance_turn()
            if state.turn_index >= len(state.seats):
                state.turn_index = 0

            state.increment_version()
            self._emit_state()
            return True

    # ------------------------------------------------------------------
    # round lifecycle

    def start_game(self) -> bool:
        """Deal a new round. Needs at least two seats and no round in progress."""
        with self._lock:
            state = self.state
            if state.status == STATUS_PLAYING:
                logger.debug(f"[{state.id}] start ignored: round already in progress")
                return False
            if not self.rules.validate_seat_count(len(state.seats)):
                logger.debug(f"[{state.id}] start ignored: {len(state.seats)} seats")
                return False
            self._start_round()
            self._log("Game started!")
            self._emit_state()
            return True

    def restart_game(self) -> bool:
        """Start over with the same roster."""
        with self._lock:
            if not self.rules.validate_seat_count(len(self.state.seats)):
                return False
            self.state.status = STATUS_WAITING
            self._start_round()
            self._log("Game restarted!")
            self._emit_state()
            return True

    def _start_round(self):
        state = self.state
        setup_round(state, self.rules.hand_size, self.rng)
        count = len(state.seats)
        state.current_total = self.rules.starting_total(count)
        state.direction = 1
        state.turn_index = self.rng.randrange(count) if self.rules.random_first_seat else 0
        state.winner_id = None
        state.bot_state = BOT_IDLE
        state.last_played_by = None
        state.score_change = 0
        state.status = STATUS_PLAYING
        state.increment_version()
        logger.info(
            f"[{state.id}] Round dealt: {count} seats, total={state.current_total}, "
            f"first={state.seats[state.turn_index].name}"
        )

    # ------------------------------------------------------------------
    # plays

    def play_card(
        self,
        seat_id: str,
        card_id: str,
        options: Union[None, Dict, PlayOptions] = None
    ) -> PlayResult:
        """
        Play one card from a seat's hand.

        Rejected intents leave the state untouched. A play that pushes the
        total past the ceiling is legal and reports success, but eliminates
        the seat that made it.
        """
        with self._lock:
            state = self.state
            check = validate_play(
                state, seat_id, card_id, options,
                (self.rules.set_total_min, self.rules.set_total_max)
            )
            if not check.valid:
                logger.debug(f"[{state.id}] Play by {seat_id} rejected: {check.error_code}")
                return check.to_play_result()

            seat = state.seats[check.seat_index]
            card = check.card
            effect = check.effect

            if effect.new_total > self.rules.ceiling:
                self._eliminate(check.seat_index)
                state.increment_version()
                self._emit_state()
                return PlayResult.ok("Player eliminated", eliminated=True)

            new_total = max(0, effect.new_total)
            state.score_change = new_total - state.current_total
            state.last_played_by = seat_id
            state.current_total = new_total

            seat.hand.remove(card)
            state.discard_pile.append(card)
            drawn = draw_card(state, self.rng)
            if drawn is not None:
                seat.hand.append(drawn)
            else:
                logger.warning(f"[{state.id}] Deck exhausted, {seat.name} draws nothing")

            if effect.reverse:
                state.direction *= -1
                self._log(f"{seat.name} reversed the direction")

            self._advance_turn()
            state.increment_version()
            self._emit_state()
            return PlayResult.ok()

    def _advance_turn(self):
        """Step in the current direction to the next alive seat."""
        state = self.state
        count = len(state.seats)
        index = state.turn_index
        for _ in range(count):
            index = (index + state.direction) % count
            if state.seats[index].is_alive:
                state.turn_index = index
                return
        # nobody alive: leave the index where it is

    def _eliminate(self, index: int):
        state = self.state
        seat = state.seats[index]
        seat.is_alive = False
        state.discard_pile.extend(seat.hand)
        seat.hand = []
        self._log(f"{seat.name} eliminated!")

        survivors = state.alive_seats()
        if len(survivors) == 1:
            state.winner_id = survivors[0].id
            state.status = STATUS_ENDED
            self._log(f"{survivors[0].name} wins the game!")
        else:
            self._advance_turn()

    # ------------------------------------------------------------------
    # bots

    def current_bot_seat(self) -> Optional[Seat]:
        """The seat to act, if the round is live and that seat is a bot."""
        state = self.state
        seat = state.current_seat
        if state.status == STATUS_PLAYING and seat and seat.is_bot and seat.is_alive:
            return seat
        return None

    def choose_bot_move(self, seat_id: str) -> Optional[BotMove]:
        seat = self.state.get_seat(seat_id)
        if not seat or not seat.is_bot:
            return None
        bot = self._bots.get(seat_id)
        if bot is None:
            bot = create_bot(
                seat.difficulty, seat_id, rng=self.rng, tuning=self.tuning, rules=self.rules
            )
            self._bots[seat_id] = bot
        return bot.choose_move(self.state)

    def play_bot_turn(self, seat_id: str, expected_version: Optional[int] = None) -> Optional[PlayResult]:
        """
        Let a bot seat take its turn.

        Returns None without touching the state when the move is stale:
        the version moved on, the round is over, or it is not this bot's
        turn any more.
        """
        with self._lock:
            state = self.state
            if expected_version is not None and state.version != expected_version:
                logger.info(f"[{state.id}] Discarding stale move for {seat_id}")
                return None
            seat = self.current_bot_seat()
            if seat is None or seat.id != seat_id:
                return None
            move = self.choose_bot_move(seat_id)
            if move is None:
                return None
            logger.debug(f"[{state.id}] {seat.name} plays {move.card_id} {move.options} -> {move.new_total}")
            return self.play_card(seat_id, move.card_id, move.options)

    def run_bot_turns(self, limit: Optional[int] = None) -> int:
        """Play bot turns back to back until a human is to act or the round ends."""
        played = 0
        while limit is None or played < limit:
            seat = self.current_bot_seat()
            if seat is None:
                break
            result = self.play_bot_turn(seat.id)
            if result is None or not result.success:
                break
            played += 1
        return played

    def set_bot_state(self, bot_state: str):
        """Cosmetic thinking/playing indicator. Does not bump the version."""
        with self._lock:
            self.state.bot_state = bot_state
            self._emit_state()

    # ------------------------------------------------------------------
    # views

    def get_snapshot(self, viewer_id: Optional[str] = None) -> ProjectedState:
        with self._lock:
            return project_state(self.state, viewer_id)

    def get_hand(self, seat_id: str) -> List[Card]:
        with self._lock:
            seat = self.state.get_seat(seat_id)
            return list(seat.hand) if seat else []

    @property
    def status(self) -> str:
        return self.state.status

    @property
    def version(self) -> int:
        return self.state.version
