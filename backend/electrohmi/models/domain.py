from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictInt


# ============================================================
# 0) ENUMS (Type Safety)
# ============================================================

class SystemStatus(str, Enum):
    NOMINAL = "NOMINAL"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"

class DriverState(str, Enum):
    STOPPED = "STOPPED"
    RUNNING = "RUNNING"


# ============================================================
# 1) CONFIG MODELS (Physics/Thresholds)
# ============================================================

class ThresholdConfig(BaseModel):
    """
    Status thresholds for Unit 01.
    power/temperature drive `status`; voltage/current bands are advisory only
    (gauge coloring) and never feed the classification.
    """
    # Power (W), roughly V*A at rated load
    power_warning_w: float = 3600.0
    power_critical_w: float = 6000.0

    # Core temperature (°C)
    temp_warning_c: float = 60.0
    temp_critical_c: float = 85.0

    # Advisory: line voltage band (V)
    voltage_min_v: float = 220.0
    voltage_max_v: float = 260.0

    # Advisory: load current (A)
    current_warning_a: float = 15.0


class PduConfig(BaseModel):
    """
    Physical constants for the PDU telemetry model.
    Units:
      - voltage in V, current in A, power in W
      - temperature in °C, frequency in Hz, efficiency in %
    """
    nominal_voltage_v: float = 240.0
    # Voltage sag at 100% load (V)
    voltage_sag_v: float = 5.0
    max_current_a: float = 30.0
    nominal_frequency_hz: float = 60.0

    # Thermal lag: T += (T_target - T) * approach_rate each tick
    ambient_temp_c: float = 25.0
    temp_rise_at_full_load_c: float = 60.0
    temp_approach_rate: float = 0.05

    # Efficiency curve peaks at 50% load
    peak_efficiency_pct: float = 95.0
    efficiency_slope_pct: float = 10.0
    max_efficiency_pct: float = 100.0

    # Noise gains (applied to one shared draw in [-0.5, 0.5))
    voltage_noise_v: float = 1.5
    current_noise_a: float = 0.2
    temp_noise_c: float = 0.1
    efficiency_noise_pct: float = 0.5
    frequency_noise_hz: float = 0.1

    # Target load domain (%); >100 is deliberate overload
    min_target_load: int = 0
    max_target_load: int = 120

    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)


# ============================================================
# 2) TELEMETRY & CONTROL STATE
# ============================================================

class TelemetrySample(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: int       # ms since epoch
    voltage: float       # V
    current: float       # A
    power: float         # W
    temperature: float   # °C
    frequency: float     # Hz
    efficiency: float    # %
    status: SystemStatus


class ControlState(BaseModel):
    target_load: int = 40
    running: bool = True
    connected: bool = True


class AdvisoryFlags(BaseModel):
    voltage_out_of_band: bool
    current_elevated: bool


class DiagnosticsReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: SystemStatus
    analysis: str
    recommendation: str
    estimated_time_until_failure: str = "N/A"

    from_llm: bool = False
    generated_at: Optional[str] = None


class HistorySummary(BaseModel):
    samples: int
    window_s: float

    peak_power_w: float
    avg_power_w: float
    peak_load_kw: float

    min_temperature_c: float
    max_temperature_c: float
    avg_efficiency_pct: float

    status_counts: Dict[str, int]
    warning_pct: float
    critical_pct: float
    latest_status: SystemStatus


# ============================================================
# 3) API RESPONSE SCHEMAS
# ============================================================

class TelemetryLatestResponse(BaseModel):
    sample: TelemetrySample
    advisory: AdvisoryFlags


class TelemetryHistoryResponse(BaseModel):
    capacity: int
    samples: List[TelemetrySample]


class ControlStateResponse(BaseModel):
    state: DriverState
    target_load: int
    running: bool
    connected: bool


class TargetLoadRequest(BaseModel):
    # strict: JSON true or "50" must not coerce to an int
    target_load: StrictInt


class AdvanceResponse(BaseModel):
    advanced: bool
    sample: Optional[TelemetrySample] = None


class DiagnosticsStatusResponse(BaseModel):
    in_flight: bool
    report: Optional[DiagnosticsReport] = None


class HealthResponse(BaseModel):
    status: str
    ts: str
    driver_state: DriverState
    target_load: int
    diagnostics_in_flight: bool
