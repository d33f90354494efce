# backend/electrohmi/deps.py
"""
deps.py

Purpose:
  Dependency Injection (DI) container for the application.
  Manages singleton instances of core services so simulation state persists
  across requests and the background tick loop.

Services Managed:
  - `SimulationDriver` (PDU simulation state + rolling history)
  - `DiagnosticsService` (Gemini report slot, single-flight)

Pattern:
  - Uses `lru_cache` to enforce Singleton pattern.
  - Tests call `reset_services()` to start from a fresh unit.
"""
from __future__ import annotations

from functools import lru_cache

from electrohmi.services.diagnostics_gateway import DiagnosticsService
from electrohmi.services.simulation_driver import SimulationDriver


@lru_cache(maxsize=1)
def get_driver() -> SimulationDriver:
    return SimulationDriver.from_env()


@lru_cache(maxsize=1)
def get_diagnostics_service() -> DiagnosticsService:
    return DiagnosticsService()


def reset_services() -> None:
    get_driver.cache_clear()
    get_diagnostics_service.cache_clear()
