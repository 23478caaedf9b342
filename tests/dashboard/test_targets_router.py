"""Unit tests for the target records API router (/api/targets/*)."""
from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from dashboard.records import TargetRegistry
from dashboard.routers.targets import router
from radar.comms.notifications import NotificationLog
from radar.simulation.entities import Target, TargetStatus

pytestmark = pytest.mark.unit


def _make_app(registry=None) -> FastAPI:
    app = FastAPI()
    app.include_router(router)
    app.state.target_registry = registry
    return app


def _registry() -> TargetRegistry:
    return TargetRegistry([
        Target("t1", 35.0, -97.0),
        Target("t2", 35.1, -96.9, status=TargetStatus.LOST),
    ])


class TestListTargets:
    def test_lists_all(self):
        client = TestClient(_make_app(_registry()))
        data = client.get("/api/targets/").json()
        assert [t["id"] for t in data] == ["t1", "t2"]

    def test_filter_by_status(self):
        client = TestClient(_make_app(_registry()))
        data = client.get("/api/targets/", params={"status": "lost"}).json()
        assert [t["id"] for t in data] == ["t2"]

    def test_503_without_registry(self):
        client = TestClient(_make_app(None))
        assert client.get("/api/targets/").status_code == 503


class TestAssignTeam:
    def test_assign(self):
        reg = _registry()
        client = TestClient(_make_app(reg))
        resp = client.post("/api/targets/t1/team", json={"team": "Alpha"})
        assert resp.status_code == 200
        assert resp.json()["assigned_team"] == "Alpha"
        assert reg.get("t1").status is TargetStatus.CLAIMED

    def test_unknown_target_404(self):
        client = TestClient(_make_app(_registry()))
        assert client.post("/api/targets/zzz/team", json={"team": "Alpha"}).status_code == 404

    def test_lost_target_400(self):
        client = TestClient(_make_app(_registry()))
        assert client.post("/api/targets/t2/team", json={"team": "Alpha"}).status_code == 400

    def test_unknown_team_400(self):
        client = TestClient(_make_app(_registry()))
        assert client.post("/api/targets/t1/team", json={"team": "Echo"}).status_code == 400

    def test_busy_team_400(self):
        reg = TargetRegistry([Target("t1", 35.0, -97.0), Target("t3", 35.2, -96.8)])
        client = TestClient(_make_app(reg))
        assert client.post("/api/targets/t1/team", json={"team": "Alpha"}).status_code == 200
        resp = client.post("/api/targets/t3/team", json={"team": "Alpha"})
        assert resp.status_code == 400
        assert "already engaged" in resp.json()["detail"]
        assert reg.get("t3").assigned_team is None

    def test_deploy_notifies(self):
        log = NotificationLog()
        reg = TargetRegistry([Target("t1", 35.0, -97.0)], log)
        client = TestClient(_make_app(reg))
        client.post("/api/targets/t1/team", json={"team": "Charlie"})
        note = log.recent()[-1]
        assert (note.message, note.severity) == ("STRIKE TEAM CHARLIE DEPLOYED TO SECTOR t1", "info")

    def test_available_teams(self):
        client = TestClient(_make_app(_registry()))
        assert client.get("/api/targets/teams").json() == {"available": ["Alpha", "Bravo", "Charlie"]}
        client.post("/api/targets/t1/team", json={"team": "Bravo"})
        assert client.get("/api/targets/teams").json() == {"available": ["Alpha", "Charlie"]}


class TestSetStatus:
    def test_set_status(self):
        reg = _registry()
        client = TestClient(_make_app(reg))
        resp = client.post("/api/targets/t1/status", json={"status": "Archived"})
        assert resp.json()["status"] == "Archived"
        assert reg.get("t1").status is TargetStatus.ARCHIVED

    def test_invalid_status_400(self):
        client = TestClient(_make_app(_registry()))
        assert client.post("/api/targets/t1/status", json={"status": "Gone"}).status_code == 400

    def test_unknown_target_404(self):
        client = TestClient(_make_app(_registry()))
        assert client.post("/api/targets/zzz/status", json={"status": "New"}).status_code == 404
