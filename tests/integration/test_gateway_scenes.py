from __future__ import annotations

import xml.etree.ElementTree as ET

from fastapi.testclient import TestClient

from repoverse.gateway.app import main as gateway_main
from repoverse.scene_core import Entity, Viewer
from repoverse.sources import github
from repoverse.sources.github import SourceError

SVG = "{http://www.w3.org/2000/svg}"


def _payload(**overrides) -> dict:
    payload = {
        "viewer": {"displayName": "Octo", "followerCount": 5, "publicItemCount": 2},
        "entities": [
            {
                "name": "alpha",
                "linkUrl": "https://github.com/octo/alpha",
                "popularityScore": 40,
                "sizeMetric": 2500,
                "mood": "happy",
                "orbitRadius": 90,
                "orbitSpeed": 4,
            },
            {"name": "beta", "linkUrl": "https://github.com/octo/beta", "texture": "ringed"},
        ],
    }
    payload.update(overrides)
    return payload


def test_render_orbital_from_payload() -> None:
    c = TestClient(gateway_main.app)
    res = c.post("/v1/scenes/orbital", json=_payload())
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("image/svg+xml")
    assert res.headers["x-scene-checks"] == "ok"
    root = ET.fromstring(res.text)
    assert len(root.findall(f".//{SVG}g[@class='planet']")) == 2
    assert len(root.findall(f".//{SVG}ellipse[@class='ring']")) == 1


def test_render_cityscape_is_reproducible_with_seed() -> None:
    c = TestClient(gateway_main.app)
    first = c.post("/v1/scenes/CITYSCAPE", json=_payload(seed=11))
    second = c.post("/v1/scenes/cityscape", json=_payload(seed=11))
    assert first.status_code == 200
    assert first.text == second.text
    assert first.headers["x-scene-entities"] == "2"


def test_unknown_style_is_rejected() -> None:
    c = TestClient(gateway_main.app)
    res = c.post("/v1/scenes/voxel", json=_payload())
    assert res.status_code == 422
    assert res.json()["detail"]["error"] == "unknown_scene_style"


def test_schema_violations_are_rejected() -> None:
    c = TestClient(gateway_main.app)
    res = c.post("/v1/scenes/orbital", json=_payload(entities=[{"name": "no-link"}]))
    assert res.status_code == 422
    detail = res.json()["detail"]
    assert detail["error"] == "invalid_scene_request"
    assert detail["issues"][0]["path"] == "entities.0"


def test_zero_orbit_speed_maps_to_build_error() -> None:
    c = TestClient(gateway_main.app)
    res = c.post(
        "/v1/scenes/orbital",
        json=_payload(entities=[{"name": "a", "linkUrl": "https://x/a", "orbitSpeed": 0}]),
    )
    assert res.status_code == 422
    detail = res.json()["detail"]
    assert detail["error"] == "non_positive_value"
    assert detail["detail"]["field"] == "orbit_speed"


def test_user_scene_uses_github_source(monkeypatch) -> None:
    seen: dict = {}

    async def fake_load(username, token=None, limit=10, values=None):
        seen["args"] = (username, limit)
        return Viewer(display_name="Octo"), [Entity(name="alpha", link_url="https://github.com/octo/alpha")]

    monkeypatch.setattr(gateway_main, "load_scene_inputs", fake_load)
    c = TestClient(gateway_main.app)
    res = c.get("/v1/users/octo/scenes/cityscape", params={"limit": 3, "seed": 1})
    assert res.status_code == 200
    assert seen["args"] == ("octo", 3)
    assert "OCTO CITY" in res.text


def test_user_scene_maps_upstream_failure_to_502(monkeypatch) -> None:
    async def failing(username, token=None, limit=10, values=None):
        raise SourceError(source="github", message="GitHub request /users/octo failed with status 500", status_code=500)

    monkeypatch.setattr(gateway_main, "load_scene_inputs", failing)
    c = TestClient(gateway_main.app)
    res = c.get("/v1/users/octo/scenes/orbital")
    assert res.status_code == 502
    assert res.json()["detail"]["error"] == "upstream_unavailable"
    assert res.json()["detail"]["source"] == "github"


def test_user_scene_end_to_end_through_mock_github(monkeypatch) -> None:
    monkeypatch.setattr(github, "RETRY_BASE_DELAY_S", 0.0)
    original_async_client = github.httpx.AsyncClient

    def handler(request):
        if request.url.path.endswith("/repos"):
            return github.httpx.Response(
                200,
                json=[
                    {"name": "alpha", "html_url": "https://github.com/octo/alpha", "stargazers_count": 30, "forks_count": 6},
                    {"name": "beta", "html_url": "https://github.com/octo/beta", "stargazers_count": 2},
                ],
            )
        return github.httpx.Response(200, json={"login": "octo", "followers": 1, "public_repos": 2})

    class RoutedAsyncClient:
        def __init__(self, *args, **kwargs) -> None:
            self._client = original_async_client(
                timeout=kwargs.get("timeout", 10),
                transport=github.httpx.MockTransport(handler),
            )

        async def __aenter__(self):
            await self._client.__aenter__()
            return self._client

        async def __aexit__(self, exc_type, exc_val, exc_tb):
            return await self._client.__aexit__(exc_type, exc_val, exc_tb)

    monkeypatch.setattr(github.httpx, "AsyncClient", RoutedAsyncClient)
    c = TestClient(gateway_main.app)
    res = c.get("/v1/users/octo/scenes/orbital")
    assert res.status_code == 200
    root = ET.fromstring(res.text)
    assert len(root.findall(f".//{SVG}g[@class='planet']")) == 2
    assert len(root.findall(f".//{SVG}ellipse[@class='ring']")) == 1


def test_limit_bounds_are_enforced() -> None:
    c = TestClient(gateway_main.app)
    res = c.get("/v1/users/octo/scenes/orbital", params={"limit": 0})
    assert res.status_code == 422
    assert res.json()["detail"]["error"] == "invalid_limit"


def test_overflowing_orbit_inputs_map_to_422_not_500() -> None:
    c = TestClient(gateway_main.app)
    for entity, field in (
        ({"name": "a", "linkUrl": "https://x/a", "orbitSpeed": 1e-310}, "orbit_speed"),
        ({"name": "a", "linkUrl": "https://x/a", "texture": "ringed", "visualRadius": 1.5e308}, "visual_radius"),
    ):
        res = c.post("/v1/scenes/orbital", json=_payload(entities=[entity]))
        assert res.status_code == 422
        detail = res.json()["detail"]
        assert detail["error"] == "value_out_of_range"
        assert detail["detail"]["field"] == field


def test_user_scene_passes_merged_settings_to_source(monkeypatch) -> None:
    seen: dict = {}

    async def fake_load(username, token=None, limit=10, values=None):
        seen["values"] = values
        return Viewer(display_name="Octo"), []

    monkeypatch.setenv("REPOVERSE_GITHUB_API_URL", "https://ghe.example.com/api/v3")
    monkeypatch.setattr(gateway_main, "load_scene_inputs", fake_load)
    c = TestClient(gateway_main.app)
    res = c.get("/v1/users/octo/scenes/cityscape")
    assert res.status_code == 200
    assert seen["values"]["REPOVERSE_GITHUB_API_URL"] == "https://ghe.example.com/api/v3"
