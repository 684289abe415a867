"""Simulated coffee maker hardware: sensors, actuators, user actions and the background brew cycle."""

import logging
import threading
from typing import Callable, Dict, List, Optional

from .brew_cycle import BrewCycle, IntervalTicker
from .states import (
    BoilerState, BoilerStatus, BrewButtonStatus, IndicatorState,
    ReliefValveState, WarmerPlateState, WarmerStatus, coerce,
)

logger = logging.getLogger(__name__)

ROW_FORMAT = "%-20s:%-8s%s"

BOILER_WATER_TEXT = {
    BoilerStatus.EMPTY: "[There is no water in the boiler]",
    BoilerStatus.NOT_EMPTY: "[Boiler has water]",
}

WARMER_POT_TEXT = {
    WarmerStatus.WARMER_EMPTY: "[There is no pot in the warmer plate]",
    WarmerStatus.POT_EMPTY: "[Warmer plate holds an empty pot]",
    WarmerStatus.POT_NOT_EMPTY: "[The pot has coffee in it!]",
}


class HardwareModel:
    """Coffee maker hardware state with the controller-facing and user-facing contracts.

    Everything the background brew cycle touches (the brewing flag, boiler status,
    warmer status) and the brew button latch are guarded by one lock. The other
    actuator fields are written only by the foreground caller.
    """

    def __init__(self, tick_interval: float = 1.0, brew_ticks: int = 5,
                 ticker_factory: Optional[Callable[[], object]] = None):
        """Initialize with brew timing; `ticker_factory` overrides the periodic timer (tests)."""
        if tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {tick_interval}")
        if brew_ticks < 1:
            raise ValueError(f"brew_ticks must be at least 1, got {brew_ticks}")
        self.tick_interval, self.brew_ticks = tick_interval, brew_ticks
        self._ticker_factory = ticker_factory or (lambda: IntervalTicker(self.tick_interval))

        self._lock = threading.Lock()
        self._brewing_in_progress = False
        self._active_cycle: Optional[BrewCycle] = None
        self._last_cycle: Optional[BrewCycle] = None

        self.boiler_state = BoilerState.OFF
        self.boiler_status = BoilerStatus.EMPTY
        self.brew_button_status = BrewButtonStatus.NOT_PUSHED
        self.warmer_plate_state = WarmerPlateState.OFF
        self.warmer_status = WarmerStatus.WARMER_EMPTY
        self.relief_valve_state = ReliefValveState.CLOSED
        self.indicator_state = IndicatorState.OFF

    # --- Lifecycle ---

    def reset(self):
        """Cancel any running brew cycle and restore power-on defaults."""
        with self._lock:
            cycle = self._active_cycle
            self._active_cycle = None
            self._brewing_in_progress = False
            if cycle is not None:
                cycle.cancel()
                cycle.ticker.stop()

            self.boiler_state = BoilerState.OFF
            self.boiler_status = BoilerStatus.EMPTY
            self.brew_button_status = BrewButtonStatus.NOT_PUSHED
            self.warmer_plate_state = WarmerPlateState.OFF
            self.warmer_status = WarmerStatus.WARMER_EMPTY
            self.relief_valve_state = ReliefValveState.CLOSED
            self.indicator_state = IndicatorState.OFF

        if cycle is not None:
            logger.info("Reset cancelled a running brew cycle")
        logger.debug("Hardware reset to power-on defaults")

    def cleanup(self):
        """Stop any brew cycle and wait briefly for its thread to exit."""
        cycle = self._last_cycle
        self.reset()
        if cycle is not None and not cycle.join(timeout=1.0):
            logger.warning("Brew cycle thread did not exit during cleanup")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()

    # --- Sensors ---

    def get_boiler_status(self) -> BoilerStatus:
        return self.boiler_status

    def get_brew_button_status(self) -> BrewButtonStatus:
        """Return the button latch and clear it in the same step."""
        with self._lock:
            status = self.brew_button_status
            self.brew_button_status = BrewButtonStatus.NOT_PUSHED
        return status

    def get_warmer_plate_status(self) -> WarmerStatus:
        return self.warmer_status

    # --- Actuators ---

    def set_boiler_state(self, state):
        """Switch the boiler. ON starts a brew cycle unless one is running; OFF aborts it."""
        state = coerce(BoilerState, state)
        self.boiler_state = state

        if state == BoilerState.ON:
            self._start_brew_cycle()
        else:
            self._abort_brew_cycle()

    def set_indicator_state(self, state):
        self.indicator_state = coerce(IndicatorState, state)

    def set_relief_valve_state(self, state):
        """Open or close the relief valve. An open valve holds back a running brew cycle."""
        self.relief_valve_state = coerce(ReliefValveState, state)

    def set_warmer_plate_state(self, state):
        self.warmer_plate_state = coerce(WarmerPlateState, state)

    # --- User actions ---

    def fill_water(self):
        with self._lock:
            self.boiler_status = BoilerStatus.NOT_EMPTY
        logger.info("Boiler filled with water")

    def press_brew_button(self) -> bool:
        """Latch the brew button. Returns False (no-op) while brewing is in progress."""
        with self._lock:
            if self._brewing_in_progress:
                rejected = True
            else:
                rejected = False
                self.brew_button_status = BrewButtonStatus.PUSHED
        if rejected:
            logger.info("NOP: There is ALREADY a brewing in progress!")
            return False
        logger.info("Brew button pushed")
        return True

    def put_pot(self):
        with self._lock:
            self.warmer_status = WarmerStatus.POT_EMPTY
        logger.info("Pot placed on warmer plate")

    def remove_pot(self):
        with self._lock:
            self.warmer_status = WarmerStatus.WARMER_EMPTY
        logger.info("Pot removed from warmer plate")

    def show_state(self, write: Callable[[str], None] = print):
        """Print the current hardware state as fixed-width rows."""
        for row in self.format_state():
            write(row)

    # --- Status ---

    @property
    def brewing_in_progress(self) -> bool:
        with self._lock:
            return self._brewing_in_progress

    @property
    def brew_timer(self):
        """Ticker owned by the running brew cycle, None when idle."""
        with self._lock:
            return self._active_cycle.ticker if self._active_cycle else None

    @property
    def last_cycle(self) -> Optional[BrewCycle]:
        """Most recently started brew cycle (running or finished)."""
        return self._last_cycle

    def wait_for_brew(self, timeout: Optional[float] = None) -> bool:
        """Block until the latest brew cycle exits. Returns False on timeout."""
        cycle = self._last_cycle
        return cycle is None or cycle.join(timeout)

    def format_state(self) -> List[str]:
        brewing = "InProgress" if self.brewing_in_progress else "NO"
        boiler = "ON" if self.boiler_state == BoilerState.ON else "OFF"
        warmer = "ON" if self.warmer_plate_state == WarmerPlateState.ON else "OFF"
        valve = "OPEN" if self.relief_valve_state == ReliefValveState.OPEN else "CLOSED"
        indicator = "ON" if self.indicator_state == IndicatorState.ON else "OFF"

        return [
            ROW_FORMAT % ("Brewing", brewing, ""),
            ROW_FORMAT % ("Boiler", boiler, BOILER_WATER_TEXT[self.boiler_status]),
            ROW_FORMAT % ("Warmer Plate", warmer, WARMER_POT_TEXT[self.warmer_status]),
            ROW_FORMAT % ("Relief Valve", valve, ""),
            ROW_FORMAT % ("Indicator", indicator, ""),
        ]

    def get_status(self) -> Dict:
        """Get current hardware status."""
        with self._lock:
            brewing = self._brewing_in_progress
            cycle = self._active_cycle
            ticks = cycle.ticks if cycle else 0
        return {
            'brewing': brewing,
            'brew_ticks_elapsed': ticks,
            'boiler': {
                'state': self.boiler_state.value,
                'status': self.boiler_status.value,
            },
            'brew_button': self.brew_button_status.value,
            'warmer_plate': {
                'state': self.warmer_plate_state.value,
                'status': self.warmer_status.value,
            },
            'relief_valve': self.relief_valve_state.value,
            'indicator': self.indicator_state.value,
        }

    # --- Brew cycle plumbing ---

    def _start_brew_cycle(self):
        with self._lock:
            if self._brewing_in_progress:
                skipped = True
            else:
                skipped = False
                self._brewing_in_progress = True
                cycle = BrewCycle(
                    self._ticker_factory(),
                    valve_open=self._relief_valve_open,
                    on_finish=self._finish_brew_cycle,
                    brew_ticks=self.brew_ticks,
                )
                self._active_cycle = self._last_cycle = cycle
        if skipped:
            logger.debug("Boiler ON ignored - brew cycle already running")
            return
        cycle.start()

    def _abort_brew_cycle(self):
        with self._lock:
            cycle = self._active_cycle
            if cycle is None:
                return
            self._active_cycle = None
            self._brewing_in_progress = False
            cycle.cancel()
        logger.info("Boiler switched OFF - brew cycle will abort at next tick")

    def _relief_valve_open(self) -> bool:
        return self.relief_valve_state == ReliefValveState.OPEN

    def _finish_brew_cycle(self, cycle: BrewCycle, completed: bool) -> bool:
        with self._lock:
            active = self._active_cycle is cycle
            completed = completed and active and not cycle.cancelled.is_set()
            if completed:
                self.warmer_status = WarmerStatus.POT_NOT_EMPTY
                self.boiler_status = BoilerStatus.EMPTY
            if active:
                self._active_cycle = None
                self._brewing_in_progress = False
        if completed:
            logger.info("Coffee is ready - pot filled, boiler empty")
        return completed
