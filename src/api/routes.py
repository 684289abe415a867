"""REST API routes: hardware sensors/actuators, user actions, status."""

import logging
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from hardware.states import (
    BoilerState, IndicatorState, ReliefValveState, WarmerPlateState,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["api"])


# Request models
class BoilerRequest(BaseModel):
    """Switch the boiler heater."""
    state: BoilerState


class WarmerPlateRequest(BaseModel):
    """Switch the warmer plate heater."""
    state: WarmerPlateState


class ReliefValveRequest(BaseModel):
    """Open or close the relief valve."""
    state: ReliefValveState


class IndicatorRequest(BaseModel):
    state: IndicatorState


def get_hardware(request: Request):
    """Get the hardware model attached to the app."""
    hardware = getattr(request.app.state, 'hardware', None)
    if hardware is None:
        raise HTTPException(status_code=503, detail="Hardware not initialized")
    return hardware


def _run(action: str, fn):
    """Run a hardware call, mapping ValueError to 400 and anything else to 500."""
    try:
        return fn()
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error in {action}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/status")
async def get_status(request: Request):
    """Get full hardware and controller status."""
    hardware = get_hardware(request)
    controller = getattr(request.app.state, 'controller', None)
    return {
        'running': getattr(request.app.state, 'running', False),
        'hardware': _run("get_status", hardware.get_status),
        'controller': controller.get_status() if controller else {},
    }


@router.get("/state/text")
async def get_state_text(request: Request):
    """Get the fixed-width state rows shown on the operator console."""
    hardware = get_hardware(request)
    return {"rows": _run("format_state", hardware.format_state)}


@router.post("/reset")
async def reset(request: Request):
    """Reset all hardware to power-on defaults."""
    hardware = get_hardware(request)
    _run("reset", hardware.reset)
    return {"status": "ok"}


# --- Sensors ---

@router.get("/boiler/status")
async def get_boiler_status(request: Request):
    hardware = get_hardware(request)
    return {"status": _run("get_boiler_status", hardware.get_boiler_status).value}


@router.get("/warmer-plate/status")
async def get_warmer_plate_status(request: Request):
    hardware = get_hardware(request)
    return {"status": _run("get_warmer_plate_status", hardware.get_warmer_plate_status).value}


@router.get("/brew-button/status")
async def get_brew_button_status(request: Request):
    """Read the brew button latch (clears it)."""
    hardware = get_hardware(request)
    return {"status": _run("get_brew_button_status", hardware.get_brew_button_status).value}


# --- Actuators ---

@router.post("/boiler")
async def set_boiler_state(body: BoilerRequest, request: Request):
    hardware = get_hardware(request)
    _run("set_boiler_state", lambda: hardware.set_boiler_state(body.state))
    return {"status": "ok", "state": body.state.value, "brewing": hardware.brewing_in_progress}


@router.post("/warmer-plate")
async def set_warmer_plate_state(body: WarmerPlateRequest, request: Request):
    hardware = get_hardware(request)
    _run("set_warmer_plate_state", lambda: hardware.set_warmer_plate_state(body.state))
    return {"status": "ok", "state": body.state.value}


@router.post("/relief-valve")
async def set_relief_valve_state(body: ReliefValveRequest, request: Request):
    hardware = get_hardware(request)
    _run("set_relief_valve_state", lambda: hardware.set_relief_valve_state(body.state))
    return {"status": "ok", "state": body.state.value}


@router.post("/indicator")
async def set_indicator_state(body: IndicatorRequest, request: Request):
    hardware = get_hardware(request)
    _run("set_indicator_state", lambda: hardware.set_indicator_state(body.state))
    return {"status": "ok", "state": body.state.value}


# --- User actions ---

@router.post("/actions/fill-water")
async def fill_water(request: Request):
    hardware = get_hardware(request)
    _run("fill_water", hardware.fill_water)
    return {"status": "ok", "boiler": hardware.get_boiler_status().value}


@router.post("/actions/put-pot")
async def put_pot(request: Request):
    hardware = get_hardware(request)
    _run("put_pot", hardware.put_pot)
    return {"status": "ok", "warmer": hardware.get_warmer_plate_status().value}


@router.post("/actions/remove-pot")
async def remove_pot(request: Request):
    hardware = get_hardware(request)
    _run("remove_pot", hardware.remove_pot)
    return {"status": "ok", "warmer": hardware.get_warmer_plate_status().value}


@router.post("/actions/press-brew-button")
async def press_brew_button(request: Request):
    """Press the brew button; rejected while a brew is in progress."""
    hardware = get_hardware(request)
    accepted = _run("press_brew_button", hardware.press_brew_button)
    if not accepted:
        return {"status": "ok", "accepted": False, "message": "Brewing already in progress"}
    return {"status": "ok", "accepted": True}
