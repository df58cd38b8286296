import io

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient
from PIL import Image

from app.core.config import settings
from app.db import mongo
from app.main import app


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def db(monkeypatch):
    client = AsyncMongoMockClient()
    database = client["userhub_test"]
    monkeypatch.setattr(mongo, "_client", client)
    monkeypatch.setattr(mongo, "_database", database)
    return database


@pytest.fixture
def storage(monkeypatch, tmp_path):
    tmp_dir = tmp_path / "tmp"
    avatars_dir = tmp_path / "public" / "avatars"
    monkeypatch.setattr(settings, "TMP_DIR", str(tmp_dir))
    monkeypatch.setattr(settings, "AVATARS_DIR", str(avatars_dir))
    return tmp_dir, avatars_dir


@pytest.fixture
def client(db):
    # No context manager: lifespan would try to reach a real MongoDB
    return TestClient(app)


@pytest.fixture
def api(client):
    prefix = f"{settings.API_PREFIX}/users"

    class Api:
        def signup(self, email="jane@example.com", password="s3cret-pass"):
            return client.post(f"{prefix}/signup", json={"email": email, "password": password})

        def login(self, email="jane@example.com", password="s3cret-pass"):
            return client.post(f"{prefix}/login", json={"email": email, "password": password})

        def get(self, path, token=None):
            headers = {"Authorization": f"Bearer {token}"} if token else {}
            return client.get(f"{prefix}{path}", headers=headers)

        def patch_avatar(self, token, files=None):
            headers = {"Authorization": f"Bearer {token}"} if token else {}
            return client.patch(f"{prefix}/avatars", headers=headers, files=files)

    return Api()


@pytest.fixture
def token(api):
    api.signup()
    return api.login().json()["token"]


def make_image_bytes(size=(600, 400), fmt="PNG", color=(200, 40, 40)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()
