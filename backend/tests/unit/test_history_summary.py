import pytest

from electrohmi.models.domain import SystemStatus
from electrohmi.services.history_summary import summarize_history
from electrohmi.services.physics_engine import seed_sample


def _s(power, temp, status, eff=90.0):
    return seed_sample(timestamp=0).model_copy(
        update={"power": power, "temperature": temp, "status": status, "efficiency": eff}
    )


def test_summary_rollup():
    samples = [
        _s(1000.0, 30.0, SystemStatus.NOMINAL),
        _s(4000.0, 40.0, SystemStatus.WARNING),
        _s(7000.0, 50.0, SystemStatus.CRITICAL),
        _s(2000.0, 20.0, SystemStatus.NOMINAL),
    ]
    out = summarize_history(samples, tick_period_ms=1000)

    assert out.samples == 4
    assert out.window_s == pytest.approx(4.0)
    assert out.peak_power_w == pytest.approx(7000.0)
    assert out.avg_power_w == pytest.approx(3500.0)
    assert out.peak_load_kw == pytest.approx(7.0)
    assert out.min_temperature_c == pytest.approx(20.0)
    assert out.max_temperature_c == pytest.approx(50.0)
    assert out.avg_efficiency_pct == pytest.approx(90.0)
    assert out.status_counts == {"NOMINAL": 2, "WARNING": 1, "CRITICAL": 1}
    assert out.warning_pct == pytest.approx(25.0)
    assert out.critical_pct == pytest.approx(25.0)
    assert out.latest_status == SystemStatus.NOMINAL


def test_summary_rejects_empty():
    with pytest.raises(ValueError):
        summarize_history([])
