"""
Unit tests using FastAPI TestClient (no separate server needed).
"""

import logging

import pytest
from fastapi.testclient import TestClient

from layerlint.server.main import app
from layerlint.server.routes import runs
from layerlint.server.store import RunStore


@pytest.fixture
def client(monkeypatch, fake_redis):
    monkeypatch.setattr(runs, "get_run_store", lambda db=0: RunStore(fake_redis))
    return TestClient(app)


class TestLayersUnit:
    def test_list_layers(self, client):
        r = client.get("/api/layers")
        assert r.status_code == 200
        layers = r.json()["layers"]
        assert [l["id"] for l in layers] == [1, 2, 3, 4, 5, 6]
        assert layers[0]["critical"] is True


class TestRunsUnit:
    def test_create_and_fetch(self, client):
        r = client.post("/api/runs", json={
            "text": "const a = <p>&quot;Hi&quot;</p>;\n",
            "filename": "a.tsx",
            "layers": [2],
            "dry_run": True,
        })
        assert r.status_code == 200
        run = r.json()
        assert run["final_text"] == 'const a = <p>"Hi"</p>;\n'
        assert run["dry_run"] is True
        assert run["resolution"]["corrected_layers"] == [1, 2]

        r = client.get(f"/api/runs/{run['id']}")
        assert r.status_code == 200
        assert r.json()["final_text"] == run["final_text"]

    def test_unknown_layer(self, client):
        r = client.post("/api/runs", json={"text": "x", "layers": [42]})
        assert r.status_code == 400

    def test_invalid_timeout(self, client):
        r = client.post("/api/runs", json={"text": "x", "timeout": 0})
        assert r.status_code == 422

    def test_missing_run(self, client):
        r = client.get("/api/runs/nope")
        assert r.status_code == 404
        assert r.json()["detail"] == "Run not found"


class TestAnalyzeUnit:
    def test_analyze(self, client):
        r = client.post("/api/analyze", json={"text": "console.log('x');\n"})
        assert r.status_code == 200
        body = r.json()
        assert body["recommended_layers"] == [1, 2]
        assert body["issues"][0]["pattern"] == "Console.log usage"


def test_root(client):
    body = client.get("/").json()
    assert body["name"] == "layerlint API"
    assert body["layers"] == 6


class TestRunStore:
    def test_save_list_delete(self, fake_redis):
        store = RunStore(fake_redis)
        run = store.save({"final_text": "x"})
        assert store.get(run["id"])["final_text"] == "x"
        assert store.list_ids() == [run["id"]]
        assert store.delete(run["id"])
        assert store.get(run["id"]) is None
        assert store.list_ids() == []


def test_startup_logs_routes_and_layers(caplog):
    with caplog.at_level(logging.INFO, logger="layerlint"):
        with TestClient(app):
            pass
    messages = [r.getMessage() for r in caplog.records]
    assert any("/api/runs/{run_id}" in m for m in messages)
    assert any("engine ready: layers [1, 2, 3, 4, 5, 6]" in m for m in messages)
