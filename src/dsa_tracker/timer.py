"""Per-question stopwatch for timed attempts."""
import asyncio
import logging
import time
from enum import Enum
from typing import Callable, Optional

from dsa_tracker.mutations import QuestionMutations

logger = logging.getLogger(__name__)


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


def format_time(seconds: Optional[int]) -> str:
    if not seconds:
        return "00:00"
    mins, secs = divmod(int(seconds), 60)
    return f"{mins:02d}:{secs:02d}"


class AttemptTimer:
    """Times one attempt at a question.

    Starting counts an attempt; stopping offers the elapsed time as a new best.
    Elapsed time is always derived from the clock, never summed from ticks, and
    a single background task refreshes ``elapsed_seconds`` for display.
    """

    def __init__(
        self,
        question_id: int,
        mutations: QuestionMutations,
        clock: Callable[[], float] = time.monotonic,
        tick_interval: float = 1.0,
        on_tick: Optional[Callable[[int], None]] = None,
    ):
        self.question_id = question_id
        self.mutations = mutations
        self.clock = clock
        self.tick_interval = tick_interval
        self.on_tick = on_tick
        self.state = TimerState.IDLE
        self.elapsed_seconds = 0
        self._started_at: Optional[float] = None
        self._ticker: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self.state is TimerState.RUNNING

    def _measure(self) -> int:
        if self._started_at is None:
            return 0
        return max(0, int(self.clock() - self._started_at))

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            self.elapsed_seconds = self._measure()
            if self.on_tick:
                self.on_tick(self.elapsed_seconds)

    def _cancel_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    async def start(self) -> bool:
        """Begin timing and count an attempt. No-op if already running."""
        if self.running:
            return False
        # raises QuestionNotFound before any state changes
        self.mutations.store.get(self.question_id)
        self.state = TimerState.RUNNING
        self._started_at = self.clock()
        self.elapsed_seconds = 0
        self._ticker = asyncio.create_task(self._tick())
        logger.debug("timer started for question %s", self.question_id)
        # the timer keeps running even if the increment is rolled back
        await self.mutations.increment_attempt(self.question_id)
        return True

    async def stop(self) -> int:
        """Stop timing, offer the result as a best time, reset the display."""
        if not self.running:
            return 0
        elapsed = self._measure()
        self._cancel_ticker()
        self.state = TimerState.IDLE
        self._started_at = None
        self.elapsed_seconds = 0
        logger.debug("timer stopped for question %s after %ss", self.question_id, elapsed)
        await self.mutations.record_best_time(self.question_id, elapsed)
        return elapsed

    def close(self) -> None:
        """Abandon the attempt when leaving the question; records nothing."""
        self._cancel_ticker()
        self.state = TimerState.IDLE
        self._started_at = None
        self.elapsed_seconds = 0
