from __future__ import annotations

from fastapi.testclient import TestClient

from fluency_api.db import engine as db_engine


def test_root_banner(client: TestClient) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == "Fluency Fusion Running"


def test_health_reports_unconfigured_dependencies(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["checks"] == {
        "database": "not_configured",
        "redis": "not_configured",
        "payment": "fake",
    }


def test_ready_without_database(client: TestClient) -> None:
    assert client.get("/ready").status_code == 200


def test_ready_503_when_database_unreachable(client: TestClient, monkeypatch) -> None:
    async def _down() -> bool:
        return False

    monkeypatch.setattr(db_engine, "engine", object())
    monkeypatch.setattr(db_engine, "ping_database", _down)

    assert client.get("/ready").status_code == 503
    data = client.get("/health").json()
    assert data["status"] == "degraded"
    assert data["checks"]["database"] == "degraded"
