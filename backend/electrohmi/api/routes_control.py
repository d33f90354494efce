"""
routes_control.py

Purpose:
  Operator control surface for Unit 01 (the "Manual Override" panel).

Endpoints:
  - GET  /control/state        : driver state + control inputs
  - POST /control/start        : resume ticking
  - POST /control/stop         : pause ticking (history frozen)
  - PUT  /control/target-load  : set target load, integer 0..120
  - POST /control/advance      : run one tick immediately

Contract:
  - Invalid target load raises `InvalidControlInput`; the app handler maps it
    to 422 and the previous setpoint stays in force.
"""
from __future__ import annotations

from fastapi import APIRouter

from electrohmi.deps import get_driver
from electrohmi.models.domain import AdvanceResponse, ControlStateResponse, TargetLoadRequest

router = APIRouter()


def _state_response() -> ControlStateResponse:
    drv = get_driver()
    ctl = drv.control_state()
    return ControlStateResponse(
        state=drv.state,
        target_load=ctl.target_load,
        running=ctl.running,
        connected=ctl.connected,
    )


@router.get("/state", response_model=ControlStateResponse)
async def control_state() -> ControlStateResponse:
    return _state_response()


@router.post("/start", response_model=ControlStateResponse)
async def control_start() -> ControlStateResponse:
    get_driver().start()
    return _state_response()


@router.post("/stop", response_model=ControlStateResponse)
async def control_stop() -> ControlStateResponse:
    get_driver().stop()
    return _state_response()


@router.put("/target-load", response_model=ControlStateResponse)
async def control_target_load(req: TargetLoadRequest) -> ControlStateResponse:
    get_driver().set_target_load(req.target_load)
    return _state_response()


@router.post("/advance", response_model=AdvanceResponse)
async def control_advance() -> AdvanceResponse:
    sample = get_driver().advance()
    return AdvanceResponse(advanced=sample is not None, sample=sample)
