"""
physics_engine.py

Purpose:
  First-order telemetry model for the simulated power-distribution unit.
  Turns the operator's target load into correlated electrical and thermal signals.

Governing Equations (lf = target_load / 100, n = shared noise in [-0.5, 0.5)):
  - **Voltage sag**: `V = V_nom - lf * V_sag + n * 1.5`
  - **Load current**: `I = I_max * lf + n * 0.2`
  - **Power**: `P = V * I`
  - **Thermal lag**: `T' = T + (T_target - T) * 0.05 + n * 0.1`, `T_target = 25 + lf * 60`
  - **Efficiency**: `eta = 95 - |lf - 0.5| * 10 + n * 0.5` (capped at 100)
  - **Frequency**: `f = 60 + n * 0.1`

Units & Conventions:
  - **Voltage**: Volts AC
  - **Current**: Amps
  - **Power**: Watts
  - **Temperature**: Degrees Celsius (°C)
  - **Timestamp**: milliseconds since epoch

Noise:
  One draw per step, shared by every field.

Clamping:
  Voltage, current and power are floored at 0. Efficiency is only capped at
  100. Temperature is never clamped.
"""
from __future__ import annotations

import time
from typing import Callable, Optional, Protocol

from electrohmi.models.domain import PduConfig, SystemStatus, TelemetrySample
from electrohmi.services.threshold_policy import classify

DEFAULT_CONFIG = PduConfig()


class NoiseSource(Protocol):
    def random(self) -> float: ...


def now_ms() -> int:
    return int(time.time() * 1000)


def seed_sample(cfg: Optional[PduConfig] = None, timestamp: Optional[int] = None) -> TelemetrySample:
    """Idle reading used to pre-fill history before the first tick."""
    cfg = cfg or DEFAULT_CONFIG
    return TelemetrySample(
        timestamp=now_ms() if timestamp is None else int(timestamp),
        voltage=float(cfg.nominal_voltage_v),
        current=0.0,
        power=0.0,
        temperature=float(cfg.ambient_temp_c),
        frequency=float(cfg.nominal_frequency_hz),
        efficiency=float(cfg.max_efficiency_pct),
        status=SystemStatus.NOMINAL,
    )


def steady_state_temperature(target_load: float, cfg: Optional[PduConfig] = None) -> float:
    cfg = cfg or DEFAULT_CONFIG
    return float(cfg.ambient_temp_c) + (float(target_load) / 100.0) * float(cfg.temp_rise_at_full_load_c)


def step(
    previous: TelemetrySample,
    target_load: float,
    rng: NoiseSource,
    cfg: Optional[PduConfig] = None,
    clock: Optional[Callable[[], int]] = None,
) -> TelemetrySample:
    """
    Advance the PDU model by one tick.

    Args:
        previous: last committed sample (only its temperature carries over)
        target_load: operator setpoint in percent (0..120)
        rng: anything with `.random()` in [0, 1); drawn exactly once
        cfg: physical constants and thresholds
        clock: returns the timestamp (ms) for the new sample

    Returns:
        A new immutable TelemetrySample. `previous` is never modified.
    """
    cfg = cfg or DEFAULT_CONFIG
    noise = float(rng.random()) - 0.5

    load_factor = float(target_load) / 100.0

    # 1) Electrical
    voltage = max(0.0, cfg.nominal_voltage_v - load_factor * cfg.voltage_sag_v + noise * cfg.voltage_noise_v)
    current = max(0.0, cfg.max_current_a * load_factor + noise * cfg.current_noise_a)
    power = max(0.0, voltage * current)

    # 2) Thermal (first-order lag toward load-dependent steady state)
    target_temp = steady_state_temperature(target_load, cfg)
    temperature = (
        previous.temperature
        + (target_temp - previous.temperature) * cfg.temp_approach_rate
        + noise * cfg.temp_noise_c
    )

    # 3) Efficiency drops away from 50% load
    efficiency = cfg.peak_efficiency_pct - abs(load_factor - 0.5) * cfg.efficiency_slope_pct + noise * cfg.efficiency_noise_pct
    efficiency = min(cfg.max_efficiency_pct, efficiency)

    frequency = cfg.nominal_frequency_hz + noise * cfg.frequency_noise_hz

    return TelemetrySample(
        timestamp=(clock or now_ms)(),
        voltage=float(voltage),
        current=float(current),
        power=float(power),
        temperature=float(temperature),
        frequency=float(frequency),
        efficiency=float(efficiency),
        status=classify(power, temperature, cfg.thresholds),
    )
