"""
routes_diagnostics.py

Purpose:
  On-demand AI diagnostics for the current telemetry snapshot.
  Only fires on explicit POST request (button click), never automatically.

Endpoints:
  - POST /diagnostics/run    : runs diagnostics, returns the report (409 if one is pending)
  - GET  /diagnostics/latest : last report + loading flag
"""
from __future__ import annotations

from fastapi import APIRouter

from electrohmi.deps import get_diagnostics_service, get_driver
from electrohmi.models.domain import DiagnosticsReport, DiagnosticsStatusResponse

router = APIRouter()


@router.post("/run", response_model=DiagnosticsReport)
async def run_diagnostics() -> DiagnosticsReport:
    """
    Snapshot the current sample and hand it to the diagnostics collaborator.
    Collaborator failures come back as the fallback report, never as 5xx.
    """
    sample = get_driver().current_sample()
    return await get_diagnostics_service().run(sample)


@router.get("/latest", response_model=DiagnosticsStatusResponse)
async def latest_diagnostics() -> DiagnosticsStatusResponse:
    svc = get_diagnostics_service()
    return DiagnosticsStatusResponse(in_flight=svc.in_flight, report=svc.latest())
