import os
import tempfile
from pathlib import Path

# The app reads its settings at import time, so point it at scratch storage first.
_TMP = Path(tempfile.mkdtemp(prefix="acadrive-test-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'acadrive_test.db'}"
os.environ["UPLOADS_DIR"] = str(_TMP / "uploads")
os.environ["JWT_SECRET"] = "test_secret_key_minimum_32_characters_long"
os.environ["PASSWORD_SALT_ROUNDS"] = "10"
os.environ["API_PREFIX"] = "/api"
os.environ["BACKEND_URL"] = "http://testserver"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from backend.config import settings  # noqa: E402
from backend.database import Base, SessionLocal, engine, init_db  # noqa: E402
from backend.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_state(tmp_path, monkeypatch):
    Base.metadata.drop_all(bind=engine)
    init_db()
    monkeypatch.setattr(settings, "uploads_dir", tmp_path / "uploads")
    yield


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def faculty(client):
    payload = {
        "email": "ada@college.edu",
        "name": "Ada",
        "password": "secret123",
        "department": "Computer Science",
    }
    r = client.post("/api/faculty", json=payload)
    assert r.status_code == 201, r.text
    body = r.json()
    return {"id": body["faculty"]["id"], "token": body["token"], **payload}


@pytest.fixture()
def auth_headers(faculty):
    return {"Authorization": f"Bearer {faculty['token']}"}


@pytest.fixture()
def branch(client):
    r = client.post(
        "/api/upload/branches",
        json={"branchName": "CS", "years": [{"label": "First"}, {"label": "Second"}]},
    )
    assert r.status_code == 201, r.text
    return r.json()["branch"]
