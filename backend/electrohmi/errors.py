"""
errors.py

Exception kinds surfaced by the simulation core and the diagnostics layer.

  - `InvalidControlInput`: rejected control input (target load out of range or
    not an integer) or a non-finite metric handed to the threshold policy.
    The call is refused and state is left unchanged.
  - `DiagnosticsUnavailable`: the external diagnostics collaborator failed.
    Always recovered into the fallback report, never propagated to clients.
  - `DiagnosticsBusy`: a diagnostics run is already in flight for this unit.
"""
from __future__ import annotations


class InvalidControlInput(ValueError):
    pass


class DiagnosticsUnavailable(RuntimeError):
    pass


class DiagnosticsBusy(RuntimeError):
    pass
