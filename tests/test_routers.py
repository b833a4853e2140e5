"""API tests for the query, health, occupancy and live feed endpoints."""

import pytest
from datetime import datetime, timedelta
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from store_traffic.database import get_db
from store_traffic.main import app
from store_traffic.services.event_sink import StorageMode
from store_traffic.utils.clock import utc_now


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    # Not used as a context manager: startup (and the generator timer) does not run
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.sink.mode = StorageMode.CONNECTED


@pytest.fixture
def broken_db_client():
    def override_get_db():
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("database is down"))
        db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("database is down"))
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestTrafficEndpoints:
    def test_recent_newest_first(self, client, add_event):
        now = utc_now()
        for minutes_ago in (5, 4, 3, 2, 1):
            add_event(now - timedelta(minutes=minutes_ago), customers_in=minutes_ago)

        resp = client.get("/api/v1/traffic/recent", params={"limit": 3})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["count"] == 3
        assert [row["customers_in"] for row in body["data"]] == [1, 2, 3]
        assert set(body["data"][0]) == {"store_id", "customers_in", "customers_out", "time_stamp"}

    def test_recent_rejects_non_positive_limit(self, client):
        assert client.get("/api/v1/traffic/recent", params={"limit": 0}).status_code == 422

    def test_hourly_rollup(self, client, add_event):
        add_event(utc_now() - timedelta(minutes=1), customers_in=5, customers_out=2)

        body = client.get("/api/v1/traffic/hourly").json()

        assert body["success"] is True
        assert body["count"] == 1
        row = body["data"][0]
        assert row["net_change"] == 3
        assert row["hour_label"].endswith(("AM", "PM"))

    def test_hourly_empty(self, client):
        assert client.get("/api/v1/traffic/hourly").json() == {"success": True, "count": 0, "data": []}

    def test_query_failure_returns_empty_unsuccessful(self, broken_db_client):
        for path in ("/api/v1/traffic/hourly", "/api/v1/traffic/recent"):
            resp = broken_db_client.get(path)
            assert resp.status_code == 503
            assert resp.json() == {"success": False, "count": 0, "data": []}


class TestHealth:
    def test_healthy(self, client):
        body = client.get("/api/v1/health").json()
        assert body["status"] == "ok"
        assert body["database"] == "ok"
        assert body["storage_mode"] == "connected"
        assert body["uptime_seconds"] >= 0

    def test_degraded_storage_reported(self, client):
        app.state.sink.mark_degraded("test outage")
        body = client.get("/api/v1/health").json()
        assert body["status"] == "degraded"
        assert body["storage_mode"] == "degraded"

    def test_database_down(self, broken_db_client):
        body = broken_db_client.get("/api/v1/health").json()
        assert body["status"] == "degraded"
        assert body["database"].startswith("error")


class TestOccupancy:
    def test_lists_configured_stores(self, client):
        body = client.get("/api/v1/occupancy").json()
        assert [row["store_id"] for row in body] == app.state.generator.store_ids

    def test_unknown_store(self, client):
        assert client.get("/api/v1/occupancy/999").status_code == 404


class TestLiveFeed:
    def test_welcome_on_connect(self, client):
        with client.websocket_connect("/api/v1/ws/traffic") as ws:
            welcome = ws.receive_json()
            assert welcome["type"] == "welcome"
            assert "Store Traffic" in welcome["message"]
            assert datetime.fromisoformat(welcome["timestamp"].replace("Z", "+00:00"))
