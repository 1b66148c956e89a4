import types

import pytest
from fastapi.testclient import TestClient

from apiscout.api import create_app
from apiscout.engine import ApiScoutEngine
from apiscout.openapi import OpenApiGenerator

from conftest import USERS_ROUTE, FakeGenaiClient, build_zip, failing_clone, ok_clone

PREFIX = "/api-importer"


def _upload(client, data: bytes, filename="project.zip", content_type="application/zip"):
    return client.post(f"{PREFIX}/upload", files={"file": (filename, data, content_type)})


def test_health(client):
    response = client.get(f"{PREFIX}/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_upload_requires_a_file(client):
    response = client.post(f"{PREFIX}/upload", data={"note": "nothing attached"})
    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}


def test_upload_rejects_non_zip(client):
    response = _upload(client, b"hello", filename="notes.txt", content_type="text/plain")
    assert response.status_code == 400
    assert response.json()["error"] == "Only ZIP files are allowed"


def test_upload_accepts_zip_extension_with_generic_type(client):
    response = _upload(client, build_zip({"a.js": ""}), content_type="application/octet-stream")
    assert response.status_code == 200


def test_upload_rejects_oversized_archive(config):
    config.max_upload_bytes = 64
    engine = ApiScoutEngine(config, generator=OpenApiGenerator())
    with TestClient(create_app(engine=engine)) as small_client:
        response = _upload(small_client, build_zip({"big.js": "x" * 4096}))
    assert response.status_code == 413


def test_upload_corrupt_zip(client):
    response = _upload(client, b"PK not really")
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to process upload"
    assert body["message"].startswith("ZIP extraction failed")


def test_upload_then_analyze_then_cleanup(client):
    uploaded = _upload(client, build_zip({"src/routes/users.js": USERS_ROUTE}))
    assert uploaded.status_code == 200
    body = uploaded.json()
    assert body["totalFiles"] == 1
    assert body["detectedPaths"] == [{
        "path": "src/routes",
        "type": "routes",
        "confidence": 0.75,
        "files": ["src/routes/users.js"],
        "framework": "express",
    }]

    upload_id = body["uploadId"]
    analyzed = client.post(f"{PREFIX}/analyze/{upload_id}")
    assert analyzed.status_code == 200
    analysis = analyzed.json()
    assert analysis["endpoints"] == [
        {"method": "GET", "path": "/users", "file": "src/routes/users.js", "line": 5},
        {"method": "POST", "path": "/users", "file": "src/routes/users.js", "line": 6},
    ]
    assert analysis["summary"] == {"totalEndpoints": 2, "byMethod": {"GET": 1, "POST": 1}, "byPath": {"users": 2}}
    assert "openApiSpec" not in analysis

    cleaned = client.delete(f"{PREFIX}/cleanup/{upload_id}")
    assert cleaned.json() == {"success": True}

    gone = client.post(f"{PREFIX}/analyze/{upload_id}")
    assert gone.status_code == 404
    assert gone.json()["error"] == "Project not found"
    assert "re-upload" in gone.json()["message"]


def test_fallback_path_omits_missing_framework(client):
    uploaded = _upload(client, build_zip({"index.js": "module.exports = {}"}))
    detected = uploaded.json()["detectedPaths"]
    assert detected == [{"path": ".", "type": "api", "confidence": 0.5, "files": ["index.js"]}]


def test_cleanup_unknown_handle(client):
    response = client.delete(f"{PREFIX}/cleanup/not-a-real-id")
    assert response.status_code == 200
    assert response.json() == {"success": True}


@pytest.mark.parametrize("payload,error", [
    ({}, "repoUrl is required"),
    ({"repoUrl": "https://bitbucket.org/a/b"}, "Invalid GitHub URL"),
])
def test_github_import_validation(client, payload, error):
    response = client.post(f"{PREFIX}/import/github", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": error}


def test_github_import(client, engine, monkeypatch):
    fake = ok_clone({"backend/api/app.ts": "import fastify from 'fastify'\nserver.get('/items', h)\n"})
    monkeypatch.setattr(engine.materializer.cloner, "_git_clone", fake)

    response = client.post(f"{PREFIX}/import/github", json={"repoUrl": "https://github.com/acme/shop"})

    assert response.status_code == 200
    body = response.json()
    assert body["detectedPaths"][0]["path"] == "backend/api"
    assert body["detectedPaths"][0]["framework"] == "fastify"
    assert fake.calls[0]["branch"] == "main"

    analyzed = client.post(f"{PREFIX}/analyze/{body['uploadId']}").json()
    assert analyzed["summary"]["byPath"] == {"items": 1}


def test_github_import_failure_is_categorized(client, engine, monkeypatch):
    monkeypatch.setattr(
        engine.materializer.cloner, "_git_clone",
        failing_clone("fatal: could not read Username for 'https://github.com': terminal prompts disabled"),
    )

    response = client.post(f"{PREFIX}/import/github", json={"repoUrl": "https://github.com/acme/private"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to import from GitHub"
    assert body["reason"] == "auth_required"
    assert "GitHub token" in body["message"]


def test_analyze_api_requires_url(client):
    response = client.post(f"{PREFIX}/analyze-api", json={})
    assert response.status_code == 400


def test_analyze_api_without_key(client):
    response = client.post(f"{PREFIX}/analyze-api", json={"apiUrl": "https://api.example.com"})
    assert response.status_code == 503


def test_analyze_api(client, engine, monkeypatch):
    from apiscout import openapi as openapi_module

    monkeypatch.setattr(
        openapi_module.requests, "request",
        lambda method, url, headers=None, timeout=None: types.SimpleNamespace(text="[]"),
    )
    engine.generator = OpenApiGenerator(client=FakeGenaiClient("openapi: 3.0.0"), model="gemini-test")

    response = client.post(f"{PREFIX}/analyze-api", json={"apiUrl": "https://api.example.com/users"})

    assert response.status_code == 200
    body = response.json()
    assert body["openApiSpec"] == "openapi: 3.0.0"
    assert body["metadata"]["analyzedUrl"] == "https://api.example.com/users"
    assert body["metadata"]["model"] == "gemini-test"


def test_stats(client):
    body = client.get(f"{PREFIX}/stats").json()
    assert body["supportedFormats"] == ["ZIP"]
    assert body["supportedSources"] == ["upload", "github"]
    assert body["maxFileSize"] == "100MB"
    assert "Express.js" in body["supportedFrameworks"]
    assert body["features"] == {"geminiAnalyzer": False}


def test_custom_route_prefix(config):
    config.route_prefix = "/scout"
    engine = ApiScoutEngine(config, generator=OpenApiGenerator())
    with TestClient(create_app(engine=engine)) as custom:
        assert custom.get("/scout/health").status_code == 200
        assert custom.get(f"{PREFIX}/health").status_code == 404


def test_github_import_null_branch_uses_default(client, engine, monkeypatch):
    fake = ok_clone({"routes/index.js": "router.get('/', h)"})
    monkeypatch.setattr(engine.materializer.cloner, "_git_clone", fake)

    response = client.post(
        f"{PREFIX}/import/github",
        json={"repoUrl": "https://github.com/acme/shop", "branch": None},
    )

    assert response.status_code == 200
    assert fake.calls[0]["branch"] == "main"


def test_error_bodies_omit_empty_fields(client):
    missing = client.post(f"{PREFIX}/analyze/gone")
    assert set(missing.json()) == {"error", "message"}

    invalid = client.post(f"{PREFIX}/import/github", json={"repoUrl": "nope"})
    assert invalid.json() == {"error": "Invalid GitHub URL"}
