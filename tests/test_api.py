from __future__ import annotations

import json
from typing import Any

import httpx
from fastapi.testclient import TestClient

import goat_api.main as api_main
from goat.builds.history import BuildRecord, save_build_record
from goat.catalog.features import FeatureCatalog
from goat.core.config import Settings
from goat.core.types import Feature

RUNS_URL = "https://api.github.com/repos/illscience/Goat/actions/runs?per_page=1"


def _credentials(**overrides: Any) -> dict[str, Any]:
    credentials: dict[str, Any] = {
        "openrouter_api_key": "or-key",
        "fal_api_key": "fal-key",
        "github_status_token": "pat",
        "github_dispatch_token": "dispatch",
        "build_trigger_secret": "",
        "timeout_s": 5.0,
    }
    credentials.update(overrides)
    return credentials


def _client(tmp_path, **credential_overrides: Any) -> TestClient:
    settings = Settings(build_logs_path=str(tmp_path / "build-logs.json"))
    app = api_main.build_app(settings, credentials=_credentials(**credential_overrides))
    return TestClient(app)


def _fake_github_get(run_status: str | None, *, jobs_status: int = 200):
    async def fake_get(self, url, *, headers):  # type: ignore[no-untyped-def]
        del self, headers
        request = httpx.Request("GET", url)
        if url == RUNS_URL:
            runs = [] if run_status is None else [
                {"id": 42, "status": run_status, "conclusion": None, "created_at": "2025-12-02T00:00:00Z"}
            ]
            return httpx.Response(status_code=200, request=request, json={"workflow_runs": runs})
        if jobs_status != 200:
            return httpx.Response(status_code=jobs_status, request=request, text="nope")
        jobs = [{"steps": [{"name": "Checkout", "status": "completed", "conclusion": "success", "started_at": None}]}]
        return httpx.Response(status_code=200, request=request, json={"jobs": jobs})

    return fake_get


def test_module_level_app_boots() -> None:
    client = TestClient(api_main.app)
    response = client.get("/api/trigger-build")
    assert response.status_code == 200
    assert response.json() == {"message": "Use POST to trigger a build", "status": "ready"}


def test_home_and_features(tmp_path) -> None:
    client = _client(tmp_path)

    home = client.get("/api/home").json()
    assert home["day"] >= 1
    assert len(home["countdown"]["display"]) >= 8
    assert len(home["features"]) == len(FeatureCatalog.load_default().released())
    assert home["buildLog"][0]["time"] == "2:03am"

    features = client.get("/api/features").json()["features"]
    assert features[0]["id"] == "what-soup-are-you"
    assert features[0]["href"] == "/feature/what-soup-are-you"

    assert client.get("/api/features/pixel-ant-colony").json()["day"] == 367
    assert client.get("/api/features/nope").status_code == 404


def test_explore_with_explicit_building_flag(tmp_path) -> None:
    client = _client(tmp_path)

    idle = client.get("/api/explore", params={"building": "false"}).json()
    building = client.get("/api/explore", params={"building": "true"}).json()

    assert idle["isBuilding"] is False
    assert idle["tiles"] == 25
    assert building["tiles"] == 26
    cells = [cell for row in building["rows"] for cell in row if cell is not None]
    assert cells[0]["type"] in {"goat", "feature", "building"}
    assert sum(1 for cell in cells if cell["type"] == "goat") == 1
    assert sum(1 for cell in cells if cell["type"] == "building") == 1
    assert len(building["rows"]) == building["height"]
    assert all(len(row) == building["width"] for row in building["rows"])


def test_explore_lays_out_unreleased_features(tmp_path) -> None:
    catalog = FeatureCatalog(
        [
            Feature(id="what-soup-are-you", day=1, title="What Soup Are You?", emoji="🍜", description="Soup"),
            Feature(id="gravity-paint", day=2, title="Gravity Paint", emoji="🌌", description="Paint", released=False),
        ]
    )
    settings = Settings(build_logs_path=str(tmp_path / "build-logs.json"))
    client = TestClient(api_main.build_app(settings, catalog=catalog, credentials=_credentials()))

    body = client.get("/api/explore", params={"building": "false"}).json()

    assert body["tiles"] == 3
    titles = [cell["title"] for row in body["rows"] for cell in row if cell is not None]
    assert "Gravity Paint" in titles
    assert [feature["id"] for feature in client.get("/api/features").json()["features"]] == ["what-soup-are-you"]


def test_explore_follows_live_build_status(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("httpx.AsyncClient.get", _fake_github_get("in_progress"))
    client = _client(tmp_path)

    body = client.get("/api/explore").json()

    assert body["isBuilding"] is True
    assert body["tiles"] == 26


def test_complete_proxies_openrouter(tmp_path, monkeypatch) -> None:
    captured: dict[str, Any] = {}

    async def fake_post(self, url, *, headers, json):  # type: ignore[no-untyped-def]
        del self, headers
        captured["json"] = json
        return httpx.Response(
            status_code=200,
            request=httpx.Request("POST", url),
            json={"choices": [{"message": {"content": "You are minestrone."}}]},
        )

    monkeypatch.setattr("httpx.AsyncClient.post", fake_post)
    client = _client(tmp_path)

    response = client.post(
        "/api/complete",
        json={"messages": [{"role": "user", "content": "soup?"}], "maxTokens": 50, "temperature": 1.1},
    )

    assert response.status_code == 200
    assert response.json() == {"content": "You are minestrone."}
    assert captured["json"]["max_tokens"] == 50
    assert captured["json"]["temperature"] == 1.1
    assert captured["json"]["model"] == "anthropic/claude-3.5-sonnet"


def test_complete_errors(tmp_path, monkeypatch) -> None:
    async def fake_post(self, url, *, headers, json):  # type: ignore[no-untyped-def]
        del self, headers, json
        return httpx.Response(status_code=429, request=httpx.Request("POST", url), text="rate limited")

    monkeypatch.setattr("httpx.AsyncClient.post", fake_post)
    payload = {"messages": [{"role": "user", "content": "hi"}]}

    missing = _client(tmp_path, openrouter_api_key="").post("/api/complete", json=payload)
    assert missing.status_code == 500
    assert missing.json() == {"error": "OpenRouter API key not configured"}

    upstream = _client(tmp_path).post("/api/complete", json=payload)
    assert upstream.status_code == 429
    assert upstream.json() == {"error": "Failed to get completion"}

    invalid = _client(tmp_path).post("/api/complete", json={"messages": []})
    assert invalid.status_code == 422


def test_complete_non_json_success_is_internal_error(tmp_path, monkeypatch) -> None:
    async def fake_post(self, url, *, headers, json):  # type: ignore[no-untyped-def]
        del self, headers, json
        return httpx.Response(status_code=200, request=httpx.Request("POST", url), text="<html>oops</html>")

    monkeypatch.setattr("httpx.AsyncClient.post", fake_post)

    response = _client(tmp_path).post("/api/complete", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_generate_image(tmp_path, monkeypatch) -> None:
    async def fake_post(self, url, *, headers, json):  # type: ignore[no-untyped-def]
        del self, headers
        assert url == "https://fal.run/fal-ai/flux/schnell"
        assert json["image_size"] == {"width": 512, "height": 512}
        return httpx.Response(
            status_code=200,
            request=httpx.Request("POST", url),
            json={"output": ["https://img/goat.png"]},
        )

    monkeypatch.setattr("httpx.AsyncClient.post", fake_post)

    response = _client(tmp_path).post("/api/generate-image", json={"prompt": "a goat astronaut"})

    assert response.status_code == 200
    assert response.json() == {"images": [{"url": "https://img/goat.png"}]}


def test_generate_image_errors(tmp_path, monkeypatch) -> None:
    state = {"status": 400, "body": "bad prompt"}

    async def fake_post(self, url, *, headers, json):  # type: ignore[no-untyped-def]
        del self, headers, json
        if state["status"] == 200:
            return httpx.Response(status_code=200, request=httpx.Request("POST", url), json={"nothing": True})
        return httpx.Response(status_code=state["status"], request=httpx.Request("POST", url), text=state["body"])

    monkeypatch.setattr("httpx.AsyncClient.post", fake_post)
    payload = {"prompt": "goat"}

    missing = _client(tmp_path, fal_api_key="").post("/api/generate-image", json=payload)
    assert missing.status_code == 500
    assert missing.json() == {"error": "Fal API key not configured"}

    upstream = _client(tmp_path).post("/api/generate-image", json=payload)
    assert upstream.status_code == 400
    assert upstream.json() == {"error": "Failed to generate image", "details": "bad prompt"}

    state["status"] = 200
    empty = _client(tmp_path).post("/api/generate-image", json=payload)
    assert empty.status_code == 500
    assert empty.json() == {"error": "No images in response", "result": {"nothing": True}}


def test_build_status(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("httpx.AsyncClient.get", _fake_github_get("queued"))

    body = _client(tmp_path).get("/api/build-status").json()
    assert body == {"isBuilding": True, "status": "queued", "conclusion": None}

    no_token = _client(tmp_path, github_status_token="").get("/api/build-status").json()
    assert no_token == {"isBuilding": False}


def test_build_status_degrades_on_malformed_run(tmp_path, monkeypatch) -> None:
    async def fake_get(self, url, *, headers):  # type: ignore[no-untyped-def]
        del self, headers
        body = {"workflow_runs": [{"id": None, "status": "queued"}]}
        return httpx.Response(status_code=200, request=httpx.Request("GET", url), json=body)

    monkeypatch.setattr("httpx.AsyncClient.get", fake_get)
    client = _client(tmp_path)

    status = client.get("/api/build-status")
    assert status.status_code == 200
    assert status.json() == {"isBuilding": False}

    explore = client.get("/api/explore")
    assert explore.status_code == 200
    assert explore.json()["isBuilding"] is False


def test_build_logs(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("httpx.AsyncClient.get", _fake_github_get("in_progress"))

    body = _client(tmp_path).get("/api/build-logs").json()

    assert body["isBuilding"] is True
    assert body["runId"] == 42
    assert body["startedAt"] == "2025-12-02T00:00:00Z"
    assert body["elapsedSeconds"] > 0
    assert body["steps"] == [{"name": "Checkout", "status": "completed", "conclusion": "success", "startedAt": None}]


def test_build_logs_error_paths(tmp_path, monkeypatch) -> None:
    no_token = _client(tmp_path, github_status_token="").get("/api/build-logs")
    assert no_token.status_code == 500
    assert no_token.json() == {"error": "No token"}

    monkeypatch.setattr("httpx.AsyncClient.get", _fake_github_get(None))
    no_runs = _client(tmp_path).get("/api/build-logs")
    assert no_runs.status_code == 404
    assert no_runs.json() == {"error": "No runs found"}

    monkeypatch.setattr("httpx.AsyncClient.get", _fake_github_get("completed", jobs_status=500))
    no_jobs = _client(tmp_path).get("/api/build-logs")
    assert no_jobs.status_code == 200
    assert no_jobs.json() == {"isBuilding": False, "status": "completed", "conclusion": None, "logs": []}


def test_trigger_build(tmp_path, monkeypatch) -> None:
    calls: list[dict[str, Any]] = []

    async def fake_post(self, url, *, headers, json):  # type: ignore[no-untyped-def]
        del self
        calls.append({"url": url, "auth": headers["Authorization"], "json": json})
        return httpx.Response(status_code=204, request=httpx.Request("POST", url))

    monkeypatch.setattr("httpx.AsyncClient.post", fake_post)

    client = _client(tmp_path, build_trigger_secret="s3cret")
    assert client.post("/api/trigger-build", json={"secret": "wrong"}).status_code == 401
    assert client.post("/api/trigger-build").status_code == 401
    assert calls == []

    response = client.post("/api/trigger-build", json={"secret": "s3cret"})
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Build triggered! The Goat is waking up..."}
    assert calls == [
        {
            "url": "https://api.github.com/repos/illscience/Goat/actions/workflows/goat-build.yml/dispatches",
            "auth": "Bearer dispatch",
            "json": {"ref": "main"},
        }
    ]


def test_trigger_build_without_secret_or_token(tmp_path, monkeypatch) -> None:
    async def fake_post(self, url, *, headers, json):  # type: ignore[no-untyped-def]
        del self, headers, json
        return httpx.Response(status_code=403, request=httpx.Request("POST", url), text="forbidden")

    monkeypatch.setattr("httpx.AsyncClient.post", fake_post)

    no_token = _client(tmp_path, github_dispatch_token="").post("/api/trigger-build", content=b"")
    assert no_token.status_code == 500
    assert no_token.json() == {"error": "GitHub token not configured"}

    forbidden = _client(tmp_path).post("/api/trigger-build", json={})
    assert forbidden.status_code == 403
    assert forbidden.json() == {"error": "Failed to trigger build"}


def test_debug_builds(tmp_path) -> None:
    client = _client(tmp_path)
    assert client.get("/api/debug/builds").json() == {"logs": []}

    save_build_record(tmp_path / "build-logs.json", BuildRecord(day=367, id="build-1", success=True))
    logs = client.get("/api/debug/builds").json()["logs"]
    assert [entry["id"] for entry in logs] == ["build-1"]

    (tmp_path / "build-logs.json").write_text(json.dumps("oops"), encoding="utf-8")
    assert client.get("/api/debug/builds").json() == {"logs": [], "error": "Failed to parse logs"}
