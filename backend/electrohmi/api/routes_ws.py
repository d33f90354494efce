from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from electrohmi.api.routes_telemetry import latest_payload
from electrohmi.config import tick_period_s

router = APIRouter()
logger = logging.getLogger(__name__)

@router.websocket("/ws/telemetry")
async def ws_telemetry(websocket: WebSocket):
    """
    WebSocket stream of the latest telemetry point every tick period.
    Same payload shape as the SSE stream so the frontend can switch easily.
    """
    await websocket.accept()
    period = tick_period_s()

    try:
        while True:
            await websocket.send_json(latest_payload())
            await asyncio.sleep(period)

    except WebSocketDisconnect:
        # normal disconnect
        return
    except Exception:
        logger.exception("Telemetry websocket failed")
        try:
            await websocket.close()
        except RuntimeError:
            # already closed by the peer
            pass
