from __future__ import annotations

import asyncio
import logging
import math
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

import httpx

from repoverse.scene_core.models import Entity, Viewer
from repoverse.scene_core.theme import resolve_palette

logger = logging.getLogger("repoverse.sources.github")

API_URL_ENV = "REPOVERSE_GITHUB_API_URL"
TIMEOUT_ENV = "REPOVERSE_SOURCE_TIMEOUT_S"
RETRIES_ENV = "REPOVERSE_SOURCE_RETRIES"
DEFAULT_API_URL = "https://api.github.com"
RETRY_BASE_DELAY_S = 0.4
DEFAULT_REPO_LIMIT = 10

LANGUAGE_COLORS = {
    "Python": "#3572A5",
    "JavaScript": "#F1E05A",
    "TypeScript": "#3178C6",
    "Go": "#00ADD8",
    "Rust": "#DEA584",
    "C": "#555555",
    "C++": "#F34B7D",
    "Java": "#B07219",
    "Ruby": "#701516",
    "Shell": "#89E051",
}


@dataclass
class SourceError(RuntimeError):
    source: str
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        return self.message


def _setting(key: str, values: Mapping[str, str] | None, fallback: str) -> str:
    """Read from merged runtime values when given, else the process environment."""
    source = values if values is not None else os.environ
    return str(source.get(key, fallback) or fallback).strip()


def _api_url(values: Mapping[str, str] | None = None) -> str:
    return _setting(API_URL_ENV, values, DEFAULT_API_URL).rstrip("/") or DEFAULT_API_URL


def _timeout_s(values: Mapping[str, str] | None = None) -> float:
    raw = _setting(TIMEOUT_ENV, values, "10")
    try:
        parsed = float(raw)
    except ValueError:
        return 10.0
    return min(max(parsed, 0.5), 60.0)


def _max_attempts(values: Mapping[str, str] | None = None) -> int:
    raw = _setting(RETRIES_ENV, values, "2")
    try:
        parsed = int(raw)
    except ValueError:
        return 2
    return min(max(parsed, 1), 5)


def _headers(token: str | None) -> dict[str, str]:
    headers = {"Accept": "application/vnd.github+json", "User-Agent": "repoverse"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def _get_json(
    path: str,
    token: str | None,
    params: dict[str, Any] | None = None,
    values: Mapping[str, str] | None = None,
) -> Any:
    last_exc: httpx.HTTPError | None = None
    attempts = _max_attempts(values)
    api_url = _api_url(values)
    timeout_s = _timeout_s(values)

    for attempt in range(1, attempts + 1):
        try:
            async with httpx.AsyncClient(timeout=timeout_s) as client:
                response = await client.get(f"{api_url}{path}", headers=_headers(token), params=params)
            if response.status_code >= 500 and attempt < attempts:
                logger.warning("GitHub: %s returned %s, retrying (%d/%d)", path, response.status_code, attempt, attempts)
                await asyncio.sleep(RETRY_BASE_DELAY_S * attempt)
                continue
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise SourceError(
                source="github",
                message=f"GitHub request {path} failed with status {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.TimeoutException as exc:
            last_exc = exc
            break
        except httpx.HTTPError as exc:
            last_exc = exc
            if attempt >= attempts:
                break
            await asyncio.sleep(RETRY_BASE_DELAY_S * attempt)

    raise SourceError(source="github", message=f"GitHub request {path} failed: {last_exc}") from last_exc


async def fetch_user_profile(
    username: str,
    token: str | None = None,
    values: Mapping[str, str] | None = None,
) -> Viewer:
    payload = await _get_json(f"/users/{username}", token, values=values)
    return Viewer(
        display_name=str(payload.get("name") or payload.get("login") or username),
        avatar_image_url=str(payload.get("avatar_url") or ""),
        follower_count=int(payload.get("followers") or 0),
        public_item_count=int(payload.get("public_repos") or 0),
    )


async def fetch_user_repositories(
    username: str,
    token: str | None = None,
    values: Mapping[str, str] | None = None,
) -> list[dict[str, Any]]:
    payload = await _get_json(
        f"/users/{username}/repos",
        token,
        params={"per_page": 100, "sort": "updated", "type": "owner"},
        values=values,
    )
    if not isinstance(payload, list):
        raise SourceError(source="github", message="GitHub repository listing was not a list")
    return [row for row in payload if isinstance(row, dict)]


def rank_repositories(repos: list[dict[str, Any]], limit: int = DEFAULT_REPO_LIMIT) -> list[dict[str, Any]]:
    ranked = sorted(repos, key=lambda row: int(row.get("stargazers_count") or 0), reverse=True)
    return ranked[: max(0, int(limit))]


def _days_since(timestamp: str | None, now: datetime) -> float | None:
    if not timestamp:
        return None
    try:
        moment = datetime.fromisoformat(str(timestamp).replace("Z", "+00:00"))
    except ValueError:
        return None
    return (now - moment).total_seconds() / 86400.0


def repository_mood(repo: dict[str, Any], now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    stars = int(repo.get("stargazers_count") or 0)
    issues = int(repo.get("open_issues_count") or 0)
    age_days = _days_since(repo.get("pushed_at"), now)

    if issues > 20 and issues > stars // 2:
        return "stressed"
    if age_days is not None and age_days <= 7:
        return "energetic"
    if age_days is not None and age_days <= 30:
        return "focused"
    if stars >= 100:
        return "happy"
    return "calm"


def entities_from_repositories(repos: list[dict[str, Any]], now: datetime | None = None) -> list[Entity]:
    """Turn ranked repositories into scene entities, innermost orbit first."""
    entities: list[Entity] = []
    for idx, repo in enumerate(repos):
        size = max(0.0, float(repo.get("size") or 0))
        forks = int(repo.get("forks_count") or 0)
        mood = repository_mood(repo, now)
        language = str(repo.get("language") or "")
        orbit_radius = 80.0 + idx * 30.0
        entities.append(
            Entity(
                name=str(repo.get("name") or f"repo-{idx}"),
                link_url=str(repo.get("html_url") or ""),
                primary_language=language,
                popularity_score=int(repo.get("stargazers_count") or 0),
                fork_score=forks,
                size_metric=size,
                mood=mood,
                texture="ringed" if forks >= 5 else "plain",
                orbit_radius=orbit_radius,
                orbit_speed=round(3000.0 / orbit_radius, 3),
                visual_radius=round(6.0 + min(14.0, math.log10(size + 1.0) * 3.0), 2),
                color_hex=LANGUAGE_COLORS.get(language, resolve_palette(mood).base),
            )
        )
    return entities


async def load_scene_inputs(
    username: str,
    token: str | None = None,
    limit: int = DEFAULT_REPO_LIMIT,
    values: Mapping[str, str] | None = None,
) -> tuple[Viewer, list[Entity]]:
    viewer, repos = await asyncio.gather(
        fetch_user_profile(username, token, values),
        fetch_user_repositories(username, token, values),
    )
    ranked = rank_repositories(repos, limit)
    logger.info("GitHub: loaded %d of %d repositories for '%s'", len(ranked), len(repos), username)
    return viewer, entities_from_repositories(ranked)


__all__ = [
    "SourceError",
    "entities_from_repositories",
    "fetch_user_profile",
    "fetch_user_repositories",
    "load_scene_inputs",
    "rank_repositories",
    "repository_mood",
]
