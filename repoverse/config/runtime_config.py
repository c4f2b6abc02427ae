from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = PROJECT_ROOT / ".env"

DEMO_USERNAME = "torvalds"
USERNAME_ENV_KEYS = ("REPOVERSE_GITHUB_USERNAME", "GITHUB_USERNAME")
TOKEN_ENV_KEYS = ("REPOVERSE_GITHUB_TOKEN", "GITHUB_TOKEN")

SECRET_KEYS = {
    "REPOVERSE_GITHUB_TOKEN",
    "GITHUB_TOKEN",
}

KNOWN_KEYS = {
    "REPOVERSE_GITHUB_USERNAME",
    "REPOVERSE_GITHUB_TOKEN",
    "REPOVERSE_GITHUB_API_URL",
    "REPOVERSE_REPO_LIMIT",
    "REPOVERSE_OUTPUT_DIR",
    "REPOVERSE_SOURCE_TIMEOUT_S",
    "REPOVERSE_SOURCE_RETRIES",
    "GITHUB_USERNAME",
    "GITHUB_TOKEN",
}

INTEGER_KEYS = {"REPOVERSE_REPO_LIMIT", "REPOVERSE_SOURCE_RETRIES"}
FLOAT_KEYS = {"REPOVERSE_SOURCE_TIMEOUT_S"}


def parse_env(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    values: dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip().strip('"').strip("'")
    return values


def merged_environment(env_file: Path | None = None) -> dict[str, str]:
    """``.env`` values overlaid by the live process environment."""
    merged = parse_env(env_file or ENV_PATH)
    for key in KNOWN_KEYS:
        value = os.getenv(key)
        if value is not None and value.strip():
            merged[key] = value.strip()
    return merged


def masked_state(values: Mapping[str, str]) -> dict[str, str]:
    masked: dict[str, str] = {}
    for key, value in values.items():
        if key in SECRET_KEYS and value:
            masked[key] = "********"
        else:
            masked[key] = value
    return masked


def _first_value(values: Mapping[str, str], keys: tuple[str, ...]) -> str:
    for key in keys:
        candidate = str(values.get(key, "") or "").strip()
        if candidate:
            return candidate
    return ""


def resolve_username(explicit: str | None = None, values: Mapping[str, str] | None = None) -> str:
    """Ordered resolution: explicit argument, then environment, then the demo user."""
    if explicit and explicit.strip():
        return explicit.strip()
    env_values = values if values is not None else merged_environment()
    return _first_value(env_values, USERNAME_ENV_KEYS) or DEMO_USERNAME


def resolve_token(values: Mapping[str, str] | None = None) -> str | None:
    env_values = values if values is not None else merged_environment()
    return _first_value(env_values, TOKEN_ENV_KEYS) or None


def validate_setup(values: Mapping[str, Any]) -> dict[str, Any]:
    errors: list[str] = []
    warnings: list[str] = []

    for key in sorted(values):
        if key.startswith("REPOVERSE_") and key not in KNOWN_KEYS:
            warnings.append(f"Unknown setting ignored: {key}")

    for key in sorted(INTEGER_KEYS & set(values)):
        raw = str(values[key]).strip()
        try:
            parsed = int(raw)
        except ValueError:
            errors.append(f"{key} must be an integer, got '{raw}'")
            continue
        if parsed <= 0:
            errors.append(f"{key} must be > 0")

    for key in sorted(FLOAT_KEYS & set(values)):
        raw = str(values[key]).strip()
        try:
            parsed_float = float(raw)
        except ValueError:
            errors.append(f"{key} must be a number, got '{raw}'")
            continue
        if parsed_float <= 0:
            errors.append(f"{key} must be > 0")

    api_url = str(values.get("REPOVERSE_GITHUB_API_URL", "")).strip()
    if api_url:
        parsed_url = urlparse(api_url)
        if parsed_url.scheme not in {"http", "https"} or not parsed_url.hostname:
            errors.append(f"REPOVERSE_GITHUB_API_URL is not a valid http(s) url: {api_url}")

    if not _first_value(values, TOKEN_ENV_KEYS):
        warnings.append("No GitHub token configured; unauthenticated requests are heavily rate limited")
    if not _first_value(values, USERNAME_ENV_KEYS):
        warnings.append(f"No default username configured; falling back to demo user '{DEMO_USERNAME}'")

    return {"ok": len(errors) == 0, "errors": errors, "warnings": warnings}


__all__ = [
    "DEMO_USERNAME",
    "ENV_PATH",
    "masked_state",
    "merged_environment",
    "parse_env",
    "resolve_token",
    "resolve_username",
    "validate_setup",
]
