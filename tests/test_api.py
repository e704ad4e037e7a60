# tests/test_api.py
"""
Test the HTTP routes.

The service dependency is overridden with the per-test service, and the
client is not entered as a context manager, so the lifespan (table creation
on the default database, scheduler) does not run.
"""

import pytest
from fastapi.testclient import TestClient

from disruption_engine.main import app
from disruption_engine.service import get_service
from simulation.seeders import seed_network

from conftest import BASE_TIME


@pytest.fixture
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(session):
    seed_network(session, BASE_TIME)
    session.commit()


class TestHealth:
    """Tests for health endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_security_headers(self, client):
        response = client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"


class TestSimulateRoutes:
    """Tests for trigger endpoints."""

    def test_manual_delay(self, client, seeded):
        response = client.post(
            "/simulate/delay",
            json={"flight_id": 1, "delay_minutes": 60, "cause": "Weather delay"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert {e["flight_id"] for e in data["events"]} == {1, 2}
        assert data["world_state"]["metrics"]["delayed_flights"] == 2
        assert data["snapshot_id"] is not None

    def test_random_delay_without_body(self, client, seeded):
        response = client.post("/simulate/delay")

        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "random"
        assert data["triggered"] is True

    def test_unknown_flight_is_404(self, client, seeded):
        response = client.post("/simulate/delay", json={"flight_id": 999, "delay_minutes": 30})

        assert response.status_code == 404
        assert "999" in response.json()["detail"]

    def test_negative_delay_is_rejected(self, client, seeded):
        response = client.post("/simulate/delay", json={"flight_id": 1, "delay_minutes": -10})

        assert response.status_code == 422

    def test_reset(self, client, seeded):
        client.post("/simulate/delay", json={"flight_id": 1, "delay_minutes": 60})

        response = client.post("/simulate/reset")

        assert response.status_code == 200
        metrics = response.json()["world_state"]["metrics"]
        assert metrics["delayed_flights"] == 0
        assert metrics["missed_connections"] == 0

    def test_update_statuses(self, client, seeded):
        # AA100 departs at BASE_TIME + 1h; the fixed clock is outside its window
        response = client.post("/simulate/update-statuses")

        assert response.status_code == 200
        assert response.json()["transitions"] == []


class TestStateRoutes:
    """Tests for read endpoints."""

    def test_state(self, client, seeded):
        response = client.get("/state")

        assert response.status_code == 200
        assert len(response.json()["flights"]) == 15
        assert len(response.json()["airports"]) == 12

    def test_disruptions(self, client, seeded):
        client.post("/simulate/delay", json={"flight_id": 1, "delay_minutes": 60})

        response = client.get("/disruptions", params={"limit": 1})

        assert response.json()["count"] == 1

    def test_rebookings_empty(self, client, seeded):
        response = client.get("/rebookings")

        assert response.status_code == 200
        assert response.json() == {"suggestions": [], "count": 0}

    def test_reject_rebooking_of_confirmed_booking(self, client, seeded):
        response = client.post("/rebookings/accept", json={"booking_id": 1, "flight_id": 2})

        assert response.status_code == 400

    def test_cost_estimate(self, client, seeded):
        response = client.get("/cost-estimate")

        assert response.status_code == 200
        assert response.json()["total_cost"] == 0


class TestSnapshotRoutes:
    """Tests for snapshot endpoints."""

    def test_save_list_load(self, client, seeded):
        saved = client.post("/snapshots", json={"label": "Baseline"}).json()["snapshot"]

        listed = client.get("/snapshots").json()
        loaded = client.get(f"/snapshots/{saved['id']}").json()

        assert listed["count"] == 1
        assert loaded["label"] == "Baseline"
        assert len(loaded["flights_data"]) == 15

    def test_unknown_snapshot_is_404(self, client):
        assert client.get("/snapshots/404").status_code == 404

    def test_restore(self, client, seeded):
        saved = client.post("/snapshots", json={"label": "Baseline"}).json()["snapshot"]
        client.post("/simulate/delay", json={"flight_id": 1, "delay_minutes": 60})

        response = client.post(f"/snapshots/{saved['id']}/restore")

        assert response.status_code == 200
        assert response.json()["world_state"]["metrics"]["delayed_flights"] == 0


class TestSimulationRoutes:
    """Tests for scenario and seed endpoints."""

    def test_list_scenarios(self, client):
        response = client.get("/simulation/scenarios")

        assert response.json()["count"] == 5

    def test_scenario_detail(self, client):
        response = client.get("/simulation/scenarios/fog_cdg")

        assert response.status_code == 200
        assert response.json()["airport"] == "CDG"

    def test_unknown_scenario_is_404(self, client):
        assert client.get("/simulation/scenarios/volcano_kef").status_code == 404
        assert client.post("/simulation/run/volcano_kef").status_code == 404

    def test_run_scenario(self, client, seeded):
        response = client.post("/simulation/run/snowstorm_jfk")

        assert response.status_code == 200
        data = response.json()
        assert data["scenario"]["id"] == "snowstorm_jfk"
        assert data["flights_affected"] == 2

    def test_seed(self, client):
        first = client.post("/simulation/seed").json()
        second = client.post("/simulation/seed").json()

        assert first["seeded"] is True
        assert first["flights"] == 15
        assert second["seeded"] is False
