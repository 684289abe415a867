"""Hardware state enums for the coffee maker: boiler, warmer plate, valve, indicator, button."""

from enum import Enum


class BoilerState(str, Enum):
    """Boiler heater actuator."""
    ON = 'on'
    OFF = 'off'


class BoilerStatus(str, Enum):
    """Boiler water sensor."""
    EMPTY = 'empty'
    NOT_EMPTY = 'not_empty'


class BrewButtonStatus(str, Enum):
    PUSHED = 'pushed'
    NOT_PUSHED = 'not_pushed'


class WarmerPlateState(str, Enum):
    """Warmer plate heating element."""
    ON = 'on'
    OFF = 'off'


class WarmerStatus(str, Enum):
    """Pot presence/content sensor on the warmer plate."""
    WARMER_EMPTY = 'warmer_empty'
    POT_EMPTY = 'pot_empty'
    POT_NOT_EMPTY = 'pot_not_empty'


class ReliefValveState(str, Enum):
    OPEN = 'open'
    CLOSED = 'closed'


class IndicatorState(str, Enum):
    ON = 'on'
    OFF = 'off'


def coerce(enum_cls, value):
    """Return value as a member of enum_cls, accepting members or their string values."""
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueError(f"Invalid {enum_cls.__name__}: {value!r}") from None
