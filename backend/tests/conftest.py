import pytest
from fastapi.testclient import TestClient

from electrohmi.deps import reset_services


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Fresh unit per test: no background ticks, no live Gemini calls."""
    monkeypatch.setenv("TICK_LOOP_ENABLED", "false")
    monkeypatch.setenv("DIAGNOSTICS_ENABLED", "false")
    monkeypatch.setenv("SIM_DETERMINISTIC", "true")
    monkeypatch.setenv("TICK_PERIOD_MS", "50")
    for key in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY", "HISTORY_LENGTH", "INITIAL_TARGET_LOAD", "SIM_AUTOSTART"):
        monkeypatch.delenv(key, raising=False)
    reset_services()
    yield
    reset_services()


@pytest.fixture
def client():
    from electrohmi.main import app

    with TestClient(app) as c:
        yield c
