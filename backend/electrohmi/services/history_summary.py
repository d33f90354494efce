"""
history_summary.py

Purpose:
  Rolls up a history snapshot into the dashboard tiles: peak load, thermal
  extremes, average efficiency and time spent in WARNING / CRITICAL.
"""
from __future__ import annotations

from collections import Counter
from typing import Sequence

from electrohmi.models.domain import HistorySummary, SystemStatus, TelemetrySample


def summarize_history(samples: Sequence[TelemetrySample], tick_period_ms: int = 1000) -> HistorySummary:
    if not samples:
        raise ValueError("cannot summarize an empty history")

    n = len(samples)
    powers = [s.power for s in samples]
    temps = [s.temperature for s in samples]

    counts = Counter(s.status.value for s in samples)
    status_counts = {st.value: int(counts.get(st.value, 0)) for st in SystemStatus}

    peak_power = max(powers)

    return HistorySummary(
        samples=n,
        window_s=round(n * tick_period_ms / 1000.0, 3),
        peak_power_w=float(round(peak_power, 2)),
        avg_power_w=float(round(sum(powers) / n, 2)),
        peak_load_kw=float(round(peak_power / 1000.0, 2)),
        min_temperature_c=float(round(min(temps), 2)),
        max_temperature_c=float(round(max(temps), 2)),
        avg_efficiency_pct=float(round(sum(s.efficiency for s in samples) / n, 2)),
        status_counts=status_counts,
        warning_pct=float(round(status_counts[SystemStatus.WARNING.value] / n * 100.0, 1)),
        critical_pct=float(round(status_counts[SystemStatus.CRITICAL.value] / n * 100.0, 1)),
        latest_status=samples[-1].status,
    )
