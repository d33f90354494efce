import math
import random

import pytest

from electrohmi.models.domain import PduConfig, SystemStatus
from electrohmi.services.physics_engine import seed_sample, step, steady_state_temperature
from electrohmi.services.threshold_policy import classify


class FixedNoise:
    """rng stub: random() always returns `value` (0.5 -> zero noise)."""

    def __init__(self, value: float = 0.5):
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


def fixed_clock():
    return 1_700_000_000_000


# ============================================================
# CLAMPS & BOUNDS
# ============================================================

@pytest.mark.parametrize("target_load", list(range(0, 121, 5)))
@pytest.mark.parametrize("noise", [0.0, 0.5, 0.999999])
def test_step_bounds_across_load_range(target_load, noise):
    prev = seed_sample(timestamp=0)
    out = step(prev, target_load, FixedNoise(noise), clock=fixed_clock)

    assert out.voltage >= 0.0
    assert out.current >= 0.0
    assert out.power >= 0.0
    assert out.efficiency <= 100.0
    assert out.status == classify(out.power, out.temperature)


def test_step_bounds_random_walk():
    rng = random.Random(1234)
    sample = seed_sample(timestamp=0)
    for i in range(500):
        load = rng.randint(0, 120)
        sample = step(sample, load, rng)
        assert sample.voltage >= 0.0 and sample.current >= 0.0 and sample.power >= 0.0
        assert sample.efficiency <= 100.0
        assert all(math.isfinite(v) for v in (sample.voltage, sample.temperature, sample.frequency))
        assert sample.status == classify(sample.power, sample.temperature)


def test_zero_noise_reference_values():
    prev = seed_sample(timestamp=0)
    out = step(prev, 50, FixedNoise(0.5), clock=fixed_clock)

    assert out.voltage == pytest.approx(237.5)
    assert out.current == pytest.approx(15.0)
    assert out.power == pytest.approx(237.5 * 15.0)
    assert out.efficiency == pytest.approx(95.0)
    assert out.frequency == pytest.approx(60.0)
    # 25 + (55 - 25) * 0.05
    assert out.temperature == pytest.approx(26.5)
    assert out.timestamp == fixed_clock()
    assert out.status == SystemStatus.NOMINAL


def test_power_uses_clamped_voltage():
    cfg = PduConfig(nominal_voltage_v=1.0, voltage_sag_v=10.0)
    out = step(seed_sample(cfg, timestamp=0), 100, FixedNoise(0.5), cfg=cfg)
    assert out.voltage == 0.0
    assert out.power == 0.0


def test_efficiency_capped_not_floored():
    capped = PduConfig(peak_efficiency_pct=110.0)
    out = step(seed_sample(timestamp=0), 50, FixedNoise(0.5), cfg=capped)
    assert out.efficiency == pytest.approx(100.0)

    steep = PduConfig(efficiency_slope_pct=500.0)
    out = step(seed_sample(timestamp=0), 120, FixedNoise(0.5), cfg=steep)
    # 95 - 0.7 * 500
    assert out.efficiency == pytest.approx(-255.0)


# ============================================================
# SHARED NOISE
# ============================================================

def test_single_noise_draw_per_step():
    rng = FixedNoise(0.9)
    step(seed_sample(timestamp=0), 60, rng)
    assert rng.calls == 1


def test_noise_is_shared_across_fields():
    base = step(seed_sample(timestamp=0), 60, FixedNoise(0.5), clock=fixed_clock)
    high = step(seed_sample(timestamp=0), 60, FixedNoise(0.9), clock=fixed_clock)
    n = 0.4

    assert high.voltage - base.voltage == pytest.approx(n * 1.5)
    assert high.current - base.current == pytest.approx(n * 0.2)
    assert high.temperature - base.temperature == pytest.approx(n * 0.1)
    assert high.efficiency - base.efficiency == pytest.approx(n * 0.5)
    assert high.frequency - base.frequency == pytest.approx(n * 0.1)


def test_previous_sample_untouched():
    prev = seed_sample(timestamp=0)
    before = prev.model_dump()
    step(prev, 120, random.Random(3))
    assert prev.model_dump() == before


# ============================================================
# THERMAL LAG
# ============================================================

@pytest.mark.parametrize("target_load, start_temp", [
    (80, 25.0),    # heat up
    (120, 25.0),   # overload heat up
    (0, 90.0),     # cool down
    (40, 49.0),    # already at steady state
])
def test_temperature_converges_monotonically(target_load, start_temp):
    target = steady_state_temperature(target_load)
    assert target == pytest.approx(25 + target_load * 0.6)

    sample = seed_sample(timestamp=0).model_copy(update={"temperature": start_temp})
    rng = FixedNoise(0.5)
    for _ in range(400):
        gap = target - sample.temperature
        nxt = step(sample, target_load, rng)
        new_gap = target - nxt.temperature
        # closes exactly 5% of the gap, never crosses the target
        assert new_gap == pytest.approx(gap * 0.95, abs=1e-9)
        assert abs(new_gap) <= abs(gap) + 1e-12
        assert gap * new_gap >= 0.0
        sample = nxt

    assert sample.temperature == pytest.approx(target, abs=1e-3)


def test_sustained_overload_goes_critical():
    sample = seed_sample(timestamp=0)
    rng = FixedNoise(0.5)
    for _ in range(200):
        sample = step(sample, 120, rng)
    # 240 - 6 = 234 V, 36 A -> 8424 W
    assert sample.power > 6000.0
    assert sample.status == SystemStatus.CRITICAL
