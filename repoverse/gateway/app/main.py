from __future__ import annotations

import logging
from datetime import datetime, timezone
from time import perf_counter
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from pydantic import BaseModel, Field

from repoverse.config.runtime_config import merged_environment, resolve_token
from repoverse.protocol import ProtocolValidationError, ProtocolValidator
from repoverse.scene_core import SceneBuildError, SeededRandomSource, build_scene, evaluate_scene
from repoverse.scene_core.models import SCENE_STYLES, Entity, Viewer
from repoverse.scene_core.nodes import serialize
from repoverse.sources.github import DEFAULT_REPO_LIMIT, SourceError, load_scene_inputs

logger = logging.getLogger("repoverse.gateway")
protocol_validator = ProtocolValidator()
SVG_MEDIA_TYPE = "image/svg+xml"

REQUEST_COUNTER = Counter(
    "repoverse_gateway_http_requests_total",
    "Total gateway HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "repoverse_gateway_http_latency_seconds",
    "Gateway request latency",
    ["method", "path"],
    buckets=(0.01, 0.03, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
RENDER_LATENCY = Histogram(
    "repoverse_scene_render_latency_seconds",
    "Scene render latency",
    ["style"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)
SCENES_RENDERED = Counter(
    "repoverse_scenes_rendered_total",
    "Scenes rendered by style",
    ["style"],
)


class SceneRequest(BaseModel):
    viewer: dict[str, Any]
    entities: list[dict[str, Any]] = Field(default_factory=list)
    seed: int | None = None


app = FastAPI(title="RepoVerse Gateway", version="0.1.0")


@app.middleware("http")
async def metrics_middleware(request, call_next):  # type: ignore[override]
    started = perf_counter()
    response = await call_next(request)
    duration_s = perf_counter() - started
    # Route templates keep username paths from exploding label cardinality.
    route = request.scope.get("route")
    path = getattr(route, "path", request.url.path)
    REQUEST_COUNTER.labels(method=request.method, path=path, status=str(response.status_code)).inc()
    REQUEST_LATENCY.labels(method=request.method, path=path).observe(duration_s)
    return response


@app.get("/health")
def health() -> dict:
    return {
        "status": "ok",
        "service": "gateway",
        "styles": list(SCENE_STYLES),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def _check_style(style: str) -> str:
    clean = style.strip().lower()
    if clean not in SCENE_STYLES:
        raise HTTPException(
            status_code=422,
            detail={"error": "unknown_scene_style", "style": style, "supported": list(SCENE_STYLES)},
        )
    return clean


def _render(style: str, viewer: Viewer, entities: list[Entity], seed: int | None) -> Response:
    started = perf_counter()
    source = SeededRandomSource(seed) if seed is not None else None
    try:
        built = build_scene(style, viewer, entities, source=source)
    except SceneBuildError as exc:
        raise HTTPException(
            status_code=422,
            detail={"error": exc.code, "message": exc.message, "detail": exc.detail},
        ) from exc
    document = serialize(built.root)
    report = evaluate_scene(built)
    if not report["ok"]:
        logger.warning("Gateway: %s scene failed checks: %s", style, report["failures"])
    RENDER_LATENCY.labels(style=style).observe(perf_counter() - started)
    SCENES_RENDERED.labels(style=style).inc()
    return Response(
        content=document,
        media_type=SVG_MEDIA_TYPE,
        headers={"X-Scene-Checks": "ok" if report["ok"] else "failed", "X-Scene-Entities": str(built.entity_count)},
    )


@app.post("/v1/scenes/{style}")
def render_scene_from_payload(style: str, req: SceneRequest) -> Response:
    clean_style = _check_style(style)
    payload = req.model_dump(exclude_none=True)
    try:
        viewer, entities = protocol_validator.scene_request(payload)
    except ProtocolValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail={"error": "invalid_scene_request", "issues": exc.issues},
        ) from exc
    return _render(clean_style, viewer, entities, req.seed)


@app.get("/v1/users/{username}/scenes/{style}")
async def render_user_scene(username: str, style: str, limit: int = DEFAULT_REPO_LIMIT, seed: int | None = None) -> Response:
    clean_style = _check_style(style)
    if limit < 1 or limit > 100:
        raise HTTPException(status_code=422, detail={"error": "invalid_limit", "min": 1, "max": 100})
    try:
        values = merged_environment()
        viewer, entities = await load_scene_inputs(username, resolve_token(values), limit, values)
    except SourceError as exc:
        logger.warning("Gateway: upstream fetch failed for '%s': %s", username, exc)
        raise HTTPException(
            status_code=502,
            detail={"error": "upstream_unavailable", "source": exc.source, "message": str(exc)},
        ) from exc
    return _render(clean_style, viewer, entities, seed)
