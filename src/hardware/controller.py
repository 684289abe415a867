"""Coffee maker control logic driving the hardware through its sensor/actuator contract."""

import logging
import threading
from typing import Dict, Optional

from .states import (
    BoilerState, BoilerStatus, BrewButtonStatus, IndicatorState,
    ReliefValveState, WarmerPlateState, WarmerStatus,
)

logger = logging.getLogger(__name__)


class CoffeeMakerController:
    """Polls sensors and commands actuators: start brew, vent on pot removal, keep coffee warm."""

    def __init__(self, hardware, poll_interval: float = 0.1):
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")
        self.hardware = hardware
        self.poll_interval = poll_interval
        self.brewing = False
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def poll(self):
        """Run one control step."""
        hw = self.hardware
        pot = hw.get_warmer_plate_status()

        if self.brewing:
            if hw.boiler_state != BoilerState.ON:
                # Boiler switched off or hardware reset behind our back
                logger.info("Brew stopped externally - controller back to idle")
                self.brewing = False
            elif hw.get_boiler_status() == BoilerStatus.EMPTY:
                self._finish_brew()
            elif pot == WarmerStatus.WARMER_EMPTY:
                if hw.relief_valve_state != ReliefValveState.OPEN:
                    logger.info("Pot removed while brewing - opening relief valve")
                    hw.set_relief_valve_state(ReliefValveState.OPEN)
            elif hw.relief_valve_state == ReliefValveState.OPEN:
                logger.info("Pot returned - closing relief valve")
                hw.set_relief_valve_state(ReliefValveState.CLOSED)

        if hw.get_brew_button_status() == BrewButtonStatus.PUSHED:
            self._handle_brew_request(pot)

        # Re-read: the brew may have just filled the pot
        pot = hw.get_warmer_plate_status()
        plate = WarmerPlateState.ON if pot == WarmerStatus.POT_NOT_EMPTY else WarmerPlateState.OFF
        if hw.warmer_plate_state != plate:
            hw.set_warmer_plate_state(plate)

    def _handle_brew_request(self, pot: WarmerStatus):
        hw = self.hardware
        if self.brewing:
            logger.info("Brew request ignored - already brewing")
            return
        if hw.get_boiler_status() != BoilerStatus.NOT_EMPTY:
            logger.warning("Cannot brew - boiler has no water")
            return
        if pot != WarmerStatus.POT_EMPTY:
            logger.warning(f"Cannot brew - warmer plate needs an empty pot (status: {pot.value})")
            return

        logger.info("Starting brew")
        hw.set_relief_valve_state(ReliefValveState.CLOSED)
        hw.set_indicator_state(IndicatorState.OFF)
        hw.set_boiler_state(BoilerState.ON)
        self.brewing = True

    def _finish_brew(self):
        hw = self.hardware
        logger.info("Brew finished - boiler off, indicator on")
        hw.set_boiler_state(BoilerState.OFF)
        hw.set_relief_valve_state(ReliefValveState.CLOSED)
        hw.set_indicator_state(IndicatorState.ON)
        self.brewing = False

    # --- Polling thread ---

    def switch_on(self):
        """Start polling on a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name='coffee-controller', daemon=True)
        self._thread.start()
        logger.info("Coffee maker switched on")

    def switch_off(self):
        """Stop polling and power down the actuators."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=max(1.0, 5 * self.poll_interval))
            self._thread = None

        hw = self.hardware
        hw.set_boiler_state(BoilerState.OFF)
        hw.set_warmer_plate_state(WarmerPlateState.OFF)
        hw.set_indicator_state(IndicatorState.OFF)
        self.brewing = False
        logger.info("Coffee maker switched off")

    def _run(self):
        while not self._stop.is_set():
            try:
                self.poll()
            except Exception as e:
                logger.error(f"Control loop error: {e}")
            self._stop.wait(self.poll_interval)

    def get_status(self) -> Dict:
        return {
            'brewing': self.brewing,
            'running': self._thread is not None and self._thread.is_alive(),
            'poll_interval': self.poll_interval,
        }
