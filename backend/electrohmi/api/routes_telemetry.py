from __future__ import annotations

import asyncio
import json

from fastapi import APIRouter
from sse_starlette.sse import EventSourceResponse

from electrohmi.config import tick_period_s
from electrohmi.deps import get_driver
from electrohmi.models.domain import (
    HistorySummary,
    TelemetryHistoryResponse,
    TelemetryLatestResponse,
)
from electrohmi.services.history_summary import summarize_history
from electrohmi.services.threshold_policy import advisory_flags

router = APIRouter()


def latest_response() -> TelemetryLatestResponse:
    drv = get_driver()
    sample = drv.current_sample()
    return TelemetryLatestResponse(sample=sample, advisory=advisory_flags(sample, drv.cfg.thresholds))


def latest_payload() -> dict:
    """JSON-ready form of `latest_response()` for the SSE and WebSocket streams."""
    return latest_response().model_dump(mode="json")


@router.get("/latest", response_model=TelemetryLatestResponse)
async def telemetry_latest() -> TelemetryLatestResponse:
    """
    Current sample plus advisory flags (voltage band / elevated current).
    Advisory flags are display hints and do not affect `sample.status`.
    """
    return latest_response()


@router.get("/history", response_model=TelemetryHistoryResponse)
async def telemetry_history() -> TelemetryHistoryResponse:
    drv = get_driver()
    return TelemetryHistoryResponse(capacity=drv.history_capacity, samples=list(drv.history()))


@router.get("/summary", response_model=HistorySummary)
async def telemetry_summary() -> HistorySummary:
    return summarize_history(get_driver().history(), tick_period_ms=int(tick_period_s() * 1000))


@router.get("/stream", response_class=EventSourceResponse)
async def telemetry_stream():
    """
    Streams the latest telemetry point every tick period (SSE).
    """
    period = tick_period_s()

    async def event_generator():
        while True:
            yield {"data": json.dumps(latest_payload())}
            await asyncio.sleep(period)

    return EventSourceResponse(event_generator())
