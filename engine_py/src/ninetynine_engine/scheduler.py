"""
Deferred bot turns.

A bot does not answer instantly: its move is scheduled behind a short,
randomized thinking delay. The scheduled task remembers the state version
it was created for and drops the move if anything changed in the meantime
(restart, seat removal, end of round).
"""

import asyncio
import inspect
import logging
import random
from typing import Any, Awaitable, Callable, Optional, Tuple, Union

from .constants import BOT_IDLE, BOT_PLAYING, BOT_THINKING, DIFFICULTY_NORMAL, STATUS_PLAYING
from .rules import BotTuning
from .validate import PlayResult

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[str, PlayResult], Union[None, Awaitable[Any]]]
StateCallback = Callable[[str], Union[None, Awaitable[Any]]]


class BotScheduler:
    """Runs bot turns for one engine, one pending move at a time."""

    def __init__(
        self,
        engine,
        rng: Optional[random.Random] = None,
        tuning: Optional[BotTuning] = None,
        on_update: Optional[UpdateCallback] = None,
        on_state: Optional[StateCallback] = None
    ):
        self.engine = engine
        self.rng = rng or random.Random()
        self.tuning = tuning or engine.tuning
        self.on_update = on_update
        self.on_state = on_state
        self._task: Optional[asyncio.Task] = None
        self._pending: Optional[Tuple[str, int]] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def think_time(self, difficulty: Optional[str]) -> float:
        low, high = self.tuning.think_time.get(
            difficulty or DIFFICULTY_NORMAL,
            self.tuning.think_time[DIFFICULTY_NORMAL]
        )
        return self.rng.uniform(low, high) * self.tuning.delay_scale

    def schedule(self) -> bool:
        """
        Schedule the current seat's move if that seat is a bot.

        Must be called from inside a running event loop. Calling it again
        for the same turn is a no-op; a pending move for an older turn is
        cancelled and replaced.

        Returns:
            True if a bot move is pending after the call
        """
        seat = self.engine.current_bot_seat()
        if seat is None:
            return False

        key = (seat.id, self.engine.version)
        if self.pending:
            if self._pending == key:
                return True
            self._task.cancel()

        self._pending = key
        self._task = asyncio.create_task(self._run(seat.id, seat.difficulty, key[1]))
        logger.debug(f"[{self.engine.state.id}] Scheduled {seat.name} at version {key[1]}")
        return True

    def cancel(self):
        """Drop any pending bot move."""
        if self.pending:
            self._task.cancel()
        self._task = None
        self._pending = None

    def _is_stale(self, seat_id: str, version: int) -> bool:
        state = self.engine.state
        current = state.current_seat
        return (
            state.version != version
            or state.status != STATUS_PLAYING
            or current is None
            or current.id != seat_id
        )

    async def _run(self, seat_id: str, difficulty: Optional[str], version: int):
        try:
            await self._set_bot_state(BOT_THINKING)
            await asyncio.sleep(self.think_time(difficulty))
            if self._is_stale(seat_id, version):
                logger.info(f"[{self.engine.state.id}] Bot {seat_id} move is stale, dropping it")
                await self._set_bot_state(BOT_IDLE)
                self._finish(reschedule=False)
                return

            await self._set_bot_state(BOT_PLAYING)
            await asyncio.sleep(self.tuning.play_pause * self.tuning.delay_scale)
            result = self.engine.play_bot_turn(seat_id, expected_version=version)
            if result is None or not result.success:
                if result is not None:
                    logger.warning(f"[{self.engine.state.id}] Bot {seat_id} move rejected: {result.code}")
                await self._set_bot_state(BOT_IDLE)
                self._finish(reschedule=False)
                return

            self.engine.set_bot_state(BOT_IDLE)
            if self.on_update:
                outcome = self.on_update(seat_id, result)
                if inspect.isawaitable(outcome):
                    await outcome
            self._finish(reschedule=True)
        except asyncio.CancelledError:
            logger.debug(f"[{self.engine.state.id}] Bot {seat_id} move cancelled")
            self.engine.set_bot_state(BOT_IDLE)
            raise
        except Exception as e:
            logger.error(f"Error executing bot move for {seat_id}: {e}")
            self._finish(reschedule=False)

    async def _set_bot_state(self, bot_state: str):
        self.engine.set_bot_state(bot_state)
        if self.on_state:
            outcome = self.on_state(bot_state)
            if inspect.isawaitable(outcome):
                await outcome

    def _finish(self, reschedule: bool):
        # a newer task may have replaced this one while it was awaiting
        if self._task is not asyncio.current_task():
            return
        self._task = None
        self._pending = None
        if reschedule:
            self.schedule()

    async def wait(self):
        """Wait until no bot move is pending (chained moves included)."""
        while self.pending:
            await asyncio.wait({self._task})
