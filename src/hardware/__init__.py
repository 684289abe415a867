"""Hardware module: simulated coffee maker hardware, brew cycle and controller."""

from .brew_cycle import BrewCycle, CycleState, IntervalTicker
from .controller import CoffeeMakerController
from .hardware_model import HardwareModel
from .states import (
    BoilerState, BoilerStatus, BrewButtonStatus, IndicatorState,
    ReliefValveState, WarmerPlateState, WarmerStatus,
)

__all__ = [
    'HardwareModel', 'CoffeeMakerController',
    'BrewCycle', 'CycleState', 'IntervalTicker',
    'BoilerState', 'BoilerStatus', 'BrewButtonStatus', 'IndicatorState',
    'ReliefValveState', 'WarmerPlateState', 'WarmerStatus',
]
