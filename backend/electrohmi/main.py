# backend/electrohmi/main.py
"""
main.py

Purpose:
  FastAPI entry point for the ElectroHMI backend (Unit 01, power distribution).

Wiring:
  - Routers: health, telemetry (REST + SSE), control, diagnostics, WebSocket.
  - Lifespan: configures logging and runs the background tick loop that calls
    `SimulationDriver.advance()` once per `TICK_PERIOD_MS`.
  - Middleware: CORS + X-Request-ID propagation.
  - Errors: `InvalidControlInput` -> 422, `DiagnosticsBusy` -> 409.

Run:
  uvicorn electrohmi.main:app --reload --port 8000
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from electrohmi.api import routes_control, routes_diagnostics, routes_health, routes_telemetry, routes_ws
from electrohmi.config import env_flag, env_str, tick_period_s
from electrohmi.deps import get_driver
from electrohmi.errors import DiagnosticsBusy, InvalidControlInput
from electrohmi.logging_setup import configure_logging, request_id_var
from electrohmi.services.simulation_driver import SimulationDriver

logger = logging.getLogger(__name__)


# ============================================================
# 1) TICK LOOP
# ============================================================

async def _tick_loop(drv: SimulationDriver, period_s: float) -> None:
    """
    Single periodic driver: one advance() per period, strictly sequential.
    """
    logger.info("Tick loop started (period=%.3fs)", period_s)
    try:
        while True:
            try:
                drv.advance()
            except Exception:
                # keep ticking
                logger.exception("Tick failed")
            await asyncio.sleep(period_s)
    finally:
        logger.info("Tick loop stopped")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # an invalid INITIAL_TARGET_LOAD fails startup once
    drv = get_driver()
    task = None
    if env_flag("TICK_LOOP_ENABLED", True):
        task = asyncio.create_task(_tick_loop(drv, tick_period_s()))
    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass


# ============================================================
# 2) FASTAPI APP SETUP
# ============================================================

app = FastAPI(
    title="ElectroHMI Backend",
    version="0.1.0",
    description="Real-time telemetry simulation, status classification and AI diagnostics for a power-distribution unit.",
    lifespan=lifespan,
)

ALLOWED_ORIGINS = env_str("ALLOWED_ORIGINS", "*")
allow_origins = ["*"] if ALLOWED_ORIGINS == "*" else [o.strip() for o in ALLOWED_ORIGINS.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(InvalidControlInput)
async def invalid_control_input_handler(request: Request, exc: InvalidControlInput) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": "InvalidControlInput", "detail": str(exc)})


@app.exception_handler(DiagnosticsBusy)
async def diagnostics_busy_handler(request: Request, exc: DiagnosticsBusy) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": "DiagnosticsBusy", "detail": str(exc)})


app.include_router(routes_health.router)
app.include_router(routes_telemetry.router, prefix="/telemetry", tags=["telemetry"])
app.include_router(routes_control.router, prefix="/control", tags=["control"])
app.include_router(routes_diagnostics.router, prefix="/diagnostics", tags=["diagnostics"])
app.include_router(routes_ws.router)
