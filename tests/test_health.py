from fastapi.testclient import TestClient

from app.main import app
from app.db import mongo

client = TestClient(app)


def test_live():
    response = client.get("/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


def test_root():
    data = client.get("/").json()
    assert data["name"] == "UserHub API"
    assert data["status"] == "running"


def test_ready_without_database(monkeypatch):
    monkeypatch.setattr(mongo, "_client", None)
    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json()["reason"] == "database_unavailable"


def test_health_without_database(monkeypatch):
    monkeypatch.setattr(mongo, "_client", None)
    response = client.get("/health")
    assert response.status_code == 503
    assert response.json()["checks"]["database"] == "unhealthy"


def test_process_time_header():
    response = client.get("/live")
    assert "X-Process-Time" in response.headers


def test_lifespan_creates_storage_dirs(monkeypatch, tmp_path):
    import app.main as main_module
    from app.core.config import settings

    tmp_dir = tmp_path / "tmp"
    avatars_dir = tmp_path / "public" / "avatars"
    monkeypatch.setattr(settings, "TMP_DIR", str(tmp_dir))
    monkeypatch.setattr(settings, "AVATARS_DIR", str(avatars_dir))

    async def noop():
        return None

    async def healthy():
        return True

    monkeypatch.setattr(main_module, "connect_to_mongo", noop)
    monkeypatch.setattr(main_module, "create_indexes", noop)
    monkeypatch.setattr(main_module, "check_database_health", healthy)
    monkeypatch.setattr(main_module, "close_mongo_connection", noop)

    assert not tmp_dir.exists()
    with TestClient(app):
        assert tmp_dir.is_dir()
        assert avatars_dir.is_dir()
