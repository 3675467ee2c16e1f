from __future__ import annotations

from fastapi.testclient import TestClient

from kaddem.db.session import get_db
from kaddem.main import create_app


class BrokenSession:
    async def execute(self, *args, **kwargs):
        raise ConnectionError("db down")


def test_health():
    r = TestClient(create_app()).get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["max_contrats_actifs"] == 5


def test_system_status_reports_db_failure():
    app = create_app()

    async def _broken_db():
        yield BrokenSession()

    app.dependency_overrides[get_db] = _broken_db
    r = TestClient(app).get("/system/status")

    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is False
    assert body["contrats"] == {"total": None, "actifs": None}
    assert body["status_job"]["hour"] == 13
