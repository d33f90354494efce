"""
threshold_policy.py

Purpose:
  Maps raw PDU metrics to the NOMINAL / WARNING / CRITICAL status.

Rules (first match wins):
  1. power > power_critical_w  OR temperature > temp_critical_c  -> CRITICAL
  2. power > power_warning_w   OR temperature > temp_warning_c   -> WARNING
  3. otherwise                                                   -> NOMINAL

Advisory checks:
  Voltage band and elevated current are display hints for gauge coloring.
  They are kept as separate functions and never change `status`.
"""
from __future__ import annotations

import math
from typing import Optional

from electrohmi.errors import InvalidControlInput
from electrohmi.models.domain import AdvisoryFlags, SystemStatus, TelemetrySample, ThresholdConfig

DEFAULT_THRESHOLDS = ThresholdConfig()


def classify(power: float, temperature: float, thresholds: Optional[ThresholdConfig] = None) -> SystemStatus:
    th = thresholds or DEFAULT_THRESHOLDS
    if not (math.isfinite(power) and math.isfinite(temperature)):
        raise InvalidControlInput(f"non-finite metric: power={power}, temperature={temperature}")

    if power > th.power_critical_w or temperature > th.temp_critical_c:
        return SystemStatus.CRITICAL
    if power > th.power_warning_w or temperature > th.temp_warning_c:
        return SystemStatus.WARNING
    return SystemStatus.NOMINAL


# ============================================================
# ADVISORY (display only)
# ============================================================

def voltage_out_of_band(voltage: float, thresholds: Optional[ThresholdConfig] = None) -> bool:
    th = thresholds or DEFAULT_THRESHOLDS
    return voltage < th.voltage_min_v or voltage > th.voltage_max_v


def current_elevated(current: float, thresholds: Optional[ThresholdConfig] = None) -> bool:
    th = thresholds or DEFAULT_THRESHOLDS
    return current > th.current_warning_a


def advisory_flags(sample: TelemetrySample, thresholds: Optional[ThresholdConfig] = None) -> AdvisoryFlags:
    return AdvisoryFlags(
        voltage_out_of_band=voltage_out_of_band(sample.voltage, thresholds),
        current_elevated=current_elevated(sample.current, thresholds),
    )
