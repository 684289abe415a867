"""Timed brew cycle: background thread that counts ticks and races the relief valve and abort."""

import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CycleState(str, Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    COMPLETED = 'completed'
    ABORTED = 'aborted'


class IntervalTicker:
    """Periodic timer firing every `interval` seconds on a monotonic schedule."""

    def __init__(self, interval: float = 1.0):
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")
        self.interval = interval
        self._stopped = threading.Event()
        self._next_tick = time.monotonic() + interval

    def wait(self) -> bool:
        """Block until the next tick. Returns False if the ticker was stopped."""
        delay = self._next_tick - time.monotonic()
        if delay > 0 and self._stopped.wait(delay):
            return False
        if self._stopped.is_set():
            return False

        now = time.monotonic()
        self._next_tick += self.interval
        if self._next_tick < now:
            # Missed ticks are dropped, not replayed
            self._next_tick = now + self.interval
        return True

    def stop(self):
        self._stopped.set()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()


class BrewCycle:
    """One brew attempt: waits for `brew_ticks` consecutive ticks with the relief valve closed.

    The cycle never writes hardware state itself. It reports through
    `on_finish(cycle, completed)`, which returns whether the completion was
    applied, and always stops its ticker on the way out.
    """

    def __init__(self, ticker, valve_open: Callable[[], bool],
                 on_finish: Callable[['BrewCycle', bool], bool], brew_ticks: int = 5):
        if brew_ticks < 1:
            raise ValueError(f"brew_ticks must be at least 1, got {brew_ticks}")
        self.ticker = ticker
        self.brew_ticks = brew_ticks
        self._valve_open = valve_open
        self._on_finish = on_finish

        self.state = CycleState.IDLE
        self.outcome: Optional[CycleState] = None
        self.ticks = 0
        self.cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Launch the cycle on a daemon thread."""
        self.state = CycleState.RUNNING
        self._thread = threading.Thread(target=self._run, name='brew-cycle', daemon=True)
        self._thread.start()
        logger.info(f"Brew cycle started ({self.brew_ticks} ticks)")

    def cancel(self):
        """Request an abort. Observed after the current tick wait, never mid-wait."""
        self.cancelled.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the cycle thread to exit. Returns True if it is no longer running."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self):
        completed = False
        try:
            completed = self._count_ticks()
        except Exception as e:
            logger.error(f"Brew cycle failed: {e}")
            raise
        finally:
            counted, completed = completed, False
            try:
                completed = self._on_finish(self, counted)
            finally:
                self.outcome = CycleState.COMPLETED if completed else CycleState.ABORTED
                self.ticker.stop()
                self.state = CycleState.IDLE

    def _count_ticks(self) -> bool:
        count = 0
        while count < self.brew_ticks:
            if not self.ticker.wait():
                logger.info("Brew cycle ticker stopped - aborting")
                return False
            self.ticks += 1

            if self.cancelled.is_set():
                logger.info(f"Brew cycle aborted after {self.ticks} ticks")
                return False

            if self._valve_open():
                # Venting restarts the countdown
                if count:
                    logger.debug(f"Relief valve open at tick {self.ticks} - countdown restarted")
                count = 0
                continue

            count += 1
            logger.debug(f"Brew tick {self.ticks} ({count}/{self.brew_ticks})")

        logger.info(f"Brew cycle completed after {self.ticks} ticks")
        return True
