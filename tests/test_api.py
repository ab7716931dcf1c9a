"""
Tests for the HTTP routes.
"""

import pytest
from fastapi.testclient import TestClient

from manifest_index.core.dependencies import get_settings
from manifest_index.main import app
from manifest_index.storage.writer import write_records


@pytest.fixture
def client(settings, make_record):
    write_records(settings.db_path, [
        make_record(name="git", version="2.40.0", binary="git"),
        make_record(name="git", version="2.41.0", binary="git | git-bash"),
        make_record(name="python", version="3.12.0", binary="python | pip"),
    ])
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_search(client):
    resp = client.get("/search", params={"q": "git"})
    assert resp.status_code == 200
    data = resp.json()
    assert len(data) == 1
    assert data[0]["version"] == "2.41.0"
    assert data[0]["binary"] == "git | git-bash"


def test_search_all(client):
    resp = client.get("/search")
    assert resp.status_code == 200
    assert [r["name"] for r in resp.json()] == ["git", "python"]


def test_search_columns(client):
    resp = client.get("/search", params={"q": "pip", "columns": ["name"]})
    assert resp.status_code == 200
    assert resp.json() == []


def test_search_unknown_column(client):
    resp = client.get("/search", params={"q": "pip", "columns": ["bogus"]})
    assert resp.status_code == 400


def test_get_app_latest(client):
    resp = client.get("/buckets/main/apps/git")
    assert resp.status_code == 200
    assert resp.json()["version"] == "2.41.0"


def test_get_app_version(client):
    resp = client.get("/buckets/main/apps/git", params={"version": "2.40.0"})
    assert resp.status_code == 200
    assert resp.json()["binary"] == "git"


def test_get_app_not_found(client):
    resp = client.get("/buckets/extras/apps/git")
    assert resp.status_code == 404


def test_rebuild(client, write_manifest):
    write_manifest("extras", "vscode", {"version": "1.90.0"})
    resp = client.post("/index/rebuild")
    assert resp.status_code == 200
    assert resp.json() == {"indexed": 1, "skipped": 0, "failed": 0}

    resp = client.get("/buckets/extras/apps/vscode")
    assert resp.status_code == 200
