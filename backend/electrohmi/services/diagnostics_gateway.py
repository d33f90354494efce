"""
Diagnostics Gateway

Purpose:
  Uses Gemini to turn a single telemetry snapshot into a short technician
  status report (status, analysis, recommendation, time until failure).

Features:
  - Gemini SDK integration (google-genai) with a JSON response schema
  - Fixed degraded report on any failure (missing key, network, bad payload)
  - Single-flight `DiagnosticsService` so two runs never race on the report slot
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Optional

from google import genai
from google.genai import types
from pydantic import BaseModel, ValidationError

from electrohmi.config import env_flag, env_str, gemini_api_key, offline_mode
from electrohmi.errors import DiagnosticsBusy, DiagnosticsUnavailable
from electrohmi.models.domain import DiagnosticsReport, SystemStatus, TelemetrySample

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

FALLBACK_ANALYSIS = "Automated diagnostics failed. Connection error."
FALLBACK_RECOMMENDATION = "Check network connection and retry."
FALLBACK_TIME_UNTIL_FAILURE = "Unknown"

PROMPT_TEMPLATE = """
You are an expert industrial control systems technician.
Analyze the following telemetry snapshot from Power Distribution Unit #01.

Telemetry Data:
- Voltage: {voltage:.2f} V
- Current: {current:.2f} A
- Power: {power:.2f} W
- Temperature: {temperature:.2f} °C
- Frequency: {frequency:.2f} Hz
- Efficiency: {efficiency:.1f} %

Provide a technical status report.
"""


class DiagnosticsPayload(BaseModel):
    """Response schema handed to Gemini and used to validate its JSON."""
    status: SystemStatus
    analysis: str
    recommendation: str
    estimatedTimeUntilFailure: str


def _now_iso() -> str:
    return datetime.now().isoformat()


def fallback_report() -> DiagnosticsReport:
    return DiagnosticsReport(
        status=SystemStatus.WARNING,
        analysis=FALLBACK_ANALYSIS,
        recommendation=FALLBACK_RECOMMENDATION,
        estimated_time_until_failure=FALLBACK_TIME_UNTIL_FAILURE,
        from_llm=False,
        generated_at=_now_iso(),
    )


def build_prompt(sample: TelemetrySample) -> str:
    return PROMPT_TEMPLATE.format(
        voltage=sample.voltage,
        current=sample.current,
        power=sample.power,
        temperature=sample.temperature,
        frequency=sample.frequency,
        efficiency=sample.efficiency,
    )


class GeminiDiagnosticsGateway:
    """
    Thin wrapper around `genai.Client`. `generate()` raises
    DiagnosticsUnavailable on every failure path; callers decide how to degrade.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        enabled: Optional[bool] = None,
        client: Any = None,
    ):
        self.api_key = api_key if api_key is not None else gemini_api_key()
        self.model = model or env_str("GEMINI_MODEL_ID", DEFAULT_MODEL)
        if enabled is None:
            enabled = env_flag("DIAGNOSTICS_ENABLED", not offline_mode())
        self.enabled = bool(enabled)
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise DiagnosticsUnavailable("API key is missing")
            try:
                self._client = genai.Client(api_key=self.api_key)
            except Exception as e:
                raise DiagnosticsUnavailable(f"Gemini client init failed: {e}") from e
        return self._client

    def generate(self, sample: TelemetrySample) -> DiagnosticsReport:
        if not self.enabled:
            raise DiagnosticsUnavailable("diagnostics disabled by configuration")

        client = self._get_client()
        try:
            resp = client.models.generate_content(
                model=self.model,
                contents=build_prompt(sample),
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=DiagnosticsPayload,
                ),
            )
        except Exception as e:
            raise DiagnosticsUnavailable(f"Gemini request failed: {e}") from e

        text = (getattr(resp, "text", None) or "").strip()
        if not text:
            raise DiagnosticsUnavailable("empty response from Gemini")

        try:
            payload = DiagnosticsPayload.model_validate_json(text)
        except ValidationError as e:
            raise DiagnosticsUnavailable(f"malformed diagnostics payload: {e}") from e

        return DiagnosticsReport(
            status=payload.status,
            analysis=payload.analysis,
            recommendation=payload.recommendation,
            estimated_time_until_failure=payload.estimatedTimeUntilFailure,
            from_llm=True,
            generated_at=_now_iso(),
        )


def request_diagnostics(sample: TelemetrySample, gateway: Any) -> DiagnosticsReport:
    """
    Ask the collaborator for a report. Never raises: any failure yields the
    fixed fallback report.
    """
    try:
        return gateway.generate(sample)
    except DiagnosticsUnavailable as e:
        logger.warning("Diagnostics unavailable: %s", e)
    except Exception:
        logger.exception("Diagnostics collaborator crashed")
    return fallback_report()


class DiagnosticsService:
    """
    Holds the latest report for one unit and guards re-entrancy.
    A second run while one is pending is rejected with DiagnosticsBusy.
    """

    def __init__(self, gateway: Any = None):
        self.gateway = gateway if gateway is not None else GeminiDiagnosticsGateway()
        self._latest: Optional[DiagnosticsReport] = None
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def latest(self) -> Optional[DiagnosticsReport]:
        return self._latest

    async def run(self, sample: TelemetrySample) -> DiagnosticsReport:
        # check-and-set has no await in between, so it is atomic on the event loop
        if self._in_flight:
            raise DiagnosticsBusy("diagnostics already in progress")
        self._in_flight = True
        try:
            logger.info("Diagnostics requested (status=%s, power=%.1fW)", sample.status.value, sample.power)
            # Offload the blocking SDK call so ticks keep flowing
            report = await asyncio.to_thread(request_diagnostics, sample, self.gateway)
            self._latest = report
            return report
        finally:
            self._in_flight = False
