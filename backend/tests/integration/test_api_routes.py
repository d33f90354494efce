from fastapi.testclient import TestClient

from electrohmi.api.routes_telemetry import latest_payload


def test_health_check(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "ts" in data
    assert data["driver_state"] == "RUNNING"
    assert data["target_load"] == 40
    assert data["diagnostics_in_flight"] is False


def test_health_reflects_stopped_driver(client: TestClient):
    client.post("/control/stop")
    client.put("/control/target-load", json={"target_load": 75})
    data = client.get("/health").json()
    assert data["driver_state"] == "STOPPED"
    assert data["target_load"] == 75


def test_telemetry_latest(client: TestClient):
    response = client.get("/telemetry/latest")
    assert response.status_code == 200
    data = response.json()

    sample = data["sample"]
    for key in ("timestamp", "voltage", "current", "power", "temperature", "frequency", "efficiency", "status"):
        assert key in sample
    assert sample["status"] in ("NOMINAL", "WARNING", "CRITICAL")
    assert set(data["advisory"]) == {"voltage_out_of_band", "current_elevated"}


def test_stream_payload_matches_latest_route(client: TestClient):
    client.post("/control/advance")
    assert latest_payload() == client.get("/telemetry/latest").json()


def test_telemetry_history_tracks_ticks(client: TestClient):
    for _ in range(5):
        assert client.post("/control/advance").json()["advanced"] is True

    data = client.get("/telemetry/history").json()
    latest = client.get("/telemetry/latest").json()["sample"]

    assert data["capacity"] == 60
    assert len(data["samples"]) == 60
    assert data["samples"][-1] == latest


def test_telemetry_summary(client: TestClient):
    client.post("/control/advance")
    response = client.get("/telemetry/summary")
    assert response.status_code == 200
    data = response.json()

    assert data["samples"] == 60
    assert sum(data["status_counts"].values()) == 60
    assert "peak_load_kw" in data
    assert "critical_pct" in data
