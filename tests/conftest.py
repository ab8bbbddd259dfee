import pytest
from fastapi.testclient import TestClient

from pitchvault.config import Settings
from pitchvault.main import create_app

ADMIN_TOKEN = "Pitch-Admin-Secret-2024"
ADMIN = {"Authorization": ADMIN_TOKEN}


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def static_root(tmp_path):
    root = tmp_path / "public"
    (root / "decks").mkdir(parents=True)
    return root


@pytest.fixture
def app_settings(tmp_path, static_root):
    return Settings(
        ADMIN_TOKEN=ADMIN_TOKEN,
        FILES_DB_PATH=str(tmp_path / "files-db.json"),
        FILE_STORAGE_PATH=str(tmp_path / "uploads"),
        STATIC_ROOT=str(static_root),
        PUBLIC_BASE_URL="https://deck.example.com/",
        CORS_ORIGINS="*",
    )


@pytest.fixture
def app(app_settings):
    return create_app(app_settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def create_file(client):
    """Register a file through the API and return the create response body."""
    def _create(name="Deck A", file_url="https://ex.com/a.pdf", is_local_file=None):
        payload = {"name": name, "fileUrl": file_url}
        if is_local_file is not None:
            payload["isLocalFile"] = is_local_file
        resp = client.post("/api/files", json=payload, headers=ADMIN)
        assert resp.status_code == 200, resp.text
        return resp.json()
    return _create


@pytest.fixture
def upload_file(client):
    def _upload(content=b"%PDF-1.4 board deck", filename="board.pdf", name=None):
        data = {"name": name} if name else None
        resp = client.post(
            "/api/files/upload",
            files={"file": (filename, content, "application/pdf")},
            data=data,
            headers=ADMIN,
        )
        assert resp.status_code == 200, resp.text
        return resp.json()
    return _upload


def find(client, file_id):
    for record in client.get("/api/files").json():
        if record["id"] == file_id:
            return record
    return None
