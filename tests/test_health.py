"""Liveness and health endpoints."""
from fastapi.testclient import TestClient


def test_root_is_plain_text(client: TestClient):
    r = client.get("/")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == "Mock API is online!"


def test_health_counts_logs(client: TestClient, storage):
    storage.events.save([{"timestamp": "2026-10-19T10:00:00.000Z", "data": "a"}])
    r = client.get("/health")
    assert r.status_code == 200
    j = r.json()
    assert j["status"] == "ok"
    assert j["uploads"] == 0
    assert j["events"] == 1
    assert j["upload_dir"] == str(storage.content.directory)


def test_request_id_header(client: TestClient):
    r = client.get("/")
    assert r.headers.get("x-request-id")
    assert r.headers["x-request-id"] != client.get("/").headers["x-request-id"]


def test_unknown_file_is_json_404(client: TestClient):
    r = client.get("/uploads/does-not-exist.png")
    assert r.status_code == 404
    j = r.json()
    assert j["status_code"] == 404
    assert j["error"] == "File not found."
    assert "request_id" in j
