"""
Tests for the Monitor API and service endpoints
"""
import time
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from factories import face_at, pose_at


@pytest.fixture
def client(monkeypatch, make_scheduler):
    """Test client whose sessions run over fake adapters"""
    from examwatch.main import app
    from examwatch.monitor import api

    monkeypatch.setattr(api, "_monitor", None)
    monkeypatch.setattr(
        api,
        "create_scheduler",
        lambda settings, session_id=None: make_scheduler(
            poses=[pose_at(0.5, 0.5)],
            faces=[face_at(0.5, 0.5)],
            tick_interval=0.02,
            session_id=session_id
        )
    )

    with TestClient(app) as test_client:
        yield test_client


def wait_for_state(client, state: str, timeout: float = 2.0) -> dict:
    deadline = time.monotonic() + timeout
    while True:
        data = client.get("/api/monitor/status").json()
        if (data["state"] == state and data["tick_count"] > 0) or time.monotonic() > deadline:
            return data
        time.sleep(0.02)


class TestServiceEndpoints:

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root_endpoint(self, client):
        data = client.get("/").json()

        assert "service" in data
        assert data["monitor"] == "/api/monitor"

    def test_monitor_health_without_session(self, client):
        data = client.get("/api/monitor/health").json()

        assert data["status"] == "healthy"
        assert data["active_session"] is None

    def test_models_status(self, client):
        status = {
            "pose_landmarker": False,
            "dlib_predictor": True,
            "dlib_face_encoder": True,
            "yolo_model": False,
            "mediapipe": True
        }
        with patch("examwatch.monitor.models.model_loader.check_models", return_value=status):
            response = client.get("/api/monitor/models-status")

        assert response.status_code == 200
        assert response.json() == status


class TestNoSession:
    """Session endpoints return 404 before a session is started"""

    @pytest.mark.parametrize("method,path", [
        ("get", "/api/monitor/status"),
        ("post", "/api/monitor/capture"),
        ("post", "/api/monitor/reset"),
        ("post", "/api/monitor/stop"),
    ])
    def test_requires_session(self, client, method, path):
        response = getattr(client, method)(path)
        assert response.status_code == 404


class TestSessionFlow:

    def test_start_session(self, client):
        response = client.post("/api/monitor/start")

        assert response.status_code == 200
        data = response.json()
        assert data["session_id"].startswith("MON_")
        assert data["state"] in ("uninitialized", "calibrating")

    def test_only_one_active_session(self, client):
        assert client.post("/api/monitor/start").status_code == 200

        response = client.post("/api/monitor/start")

        assert response.status_code == 409

    def test_start_failure_returns_500(self, client, monkeypatch):
        from examwatch.monitor import api

        def broken_factory(settings, session_id=None):
            raise RuntimeError("camera unavailable")

        monkeypatch.setattr(api, "create_scheduler", broken_factory)

        response = client.post("/api/monitor/start")

        assert response.status_code == 500
        assert "camera unavailable" in response.json()["detail"]

    def test_status_during_calibration(self, client):
        client.post("/api/monitor/start")

        data = wait_for_state(client, "calibrating")

        assert data["state"] == "calibrating"
        assert data["active_message"] == ""
        assert data["captured"] is False
        assert data["calibration_status"] == "Align your face in the center and capture."
        assert data["warning"]["face_centered"] is True

    def test_capture_then_reset(self, client):
        client.post("/api/monitor/start")
        wait_for_state(client, "calibrating")

        capture = client.post("/api/monitor/capture").json()

        assert capture["captured"] is True
        assert capture["state"] == "monitoring"
        assert capture["calibration_status"] == "Face captured successfully!"

        status = client.get("/api/monitor/status").json()
        assert status["captured"] is True
        assert status["state"] == "monitoring"

        reset = client.post("/api/monitor/reset").json()
        assert reset["state"] == "calibrating"
        assert reset["captured"] is False
        assert reset["active_message"] == ""

    def test_stop_session(self, client):
        session_id = client.post("/api/monitor/start").json()["session_id"]
        wait_for_state(client, "calibrating")

        response = client.post("/api/monitor/stop")

        assert response.status_code == 200
        data = response.json()
        assert data["session_id"] == session_id
        assert data["state"] == "terminated"
        assert data["ticks"] >= 1
        assert client.get("/api/monitor/status").status_code == 404

    def test_restart_after_stop(self, client):
        first = client.post("/api/monitor/start").json()["session_id"]
        client.post("/api/monitor/stop")

        response = client.post("/api/monitor/start")

        assert response.status_code == 200
        assert response.json()["session_id"] != first

    def test_start_with_session_id(self, client):
        response = client.post("/api/monitor/start", json={"session_id": "MON_RESUME"})

        assert response.status_code == 200
        assert response.json()["session_id"] == "MON_RESUME"
        assert client.get("/api/monitor/status").json()["session_id"] == "MON_RESUME"
