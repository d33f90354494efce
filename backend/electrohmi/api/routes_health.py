from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter

from electrohmi.deps import get_diagnostics_service, get_driver
from electrohmi.models.domain import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness plus a glance at the unit: driver state, setpoint, pending diagnostics."""
    drv = get_driver()
    return HealthResponse(
        status="ok",
        ts=datetime.now().isoformat(),
        driver_state=drv.state,
        target_load=drv.control_state().target_load,
        diagnostics_in_flight=get_diagnostics_service().in_flight,
    )
