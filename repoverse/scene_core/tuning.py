from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class SceneTuning:
    width: int
    height: int
    iso_scale: float
    orbit_squash: float
    orbit_duration_k: float
    fade_step_s: float
    fade_duration_s: float
    hud_per_entity_s: float
    hud_min_cycle_s: float
    hud_epsilon: float
    window_min_height: float
    window_margin: float
    floor_height: float
    window_probability: float
    beacon_popularity_threshold: int
    beacon_fork_threshold: int
    star_count: int

    @property
    def iso_offset_y(self) -> float:
        return self.height / 1.8


def _env_int(name: str, fallback: int, min_value: int = 0, max_value: int = 10_000) -> int:
    raw = str(os.getenv(name, "")).strip()
    if not raw:
        return fallback
    try:
        value = int(raw)
    except ValueError:
        return fallback
    return max(min_value, min(max_value, value))


def _env_float(name: str, fallback: float, min_value: float = 0.0, max_value: float = 10_000.0) -> float:
    raw = str(os.getenv(name, "")).strip()
    if not raw:
        return fallback
    try:
        value = float(raw)
    except ValueError:
        return fallback
    return max(min_value, min(max_value, value))


def default_tuning() -> SceneTuning:
    return SceneTuning(
        width=_env_int("REPOVERSE_SCENE_WIDTH", 800, min_value=200, max_value=4000),
        height=_env_int("REPOVERSE_SCENE_HEIGHT", 600, min_value=200, max_value=4000),
        iso_scale=_env_float("REPOVERSE_ISO_SCALE", 24.0, min_value=4.0, max_value=96.0),
        orbit_squash=_env_float("REPOVERSE_ORBIT_SQUASH", 0.4, min_value=0.05, max_value=1.0),
        orbit_duration_k=_env_float("REPOVERSE_ORBIT_DURATION_K", 1000.0, min_value=1.0),
        fade_step_s=_env_float("REPOVERSE_FADE_STEP_S", 0.05, max_value=5.0),
        fade_duration_s=_env_float("REPOVERSE_FADE_DURATION_S", 0.8, min_value=0.05, max_value=30.0),
        hud_per_entity_s=_env_float("REPOVERSE_HUD_PER_ENTITY_S", 4.0, min_value=0.5, max_value=120.0),
        hud_min_cycle_s=_env_float("REPOVERSE_HUD_MIN_CYCLE_S", 10.0, min_value=1.0, max_value=3600.0),
        hud_epsilon=_env_float("REPOVERSE_HUD_EPSILON", 0.001, min_value=1e-6, max_value=0.01),
        window_min_height=_env_float("REPOVERSE_WINDOW_MIN_HEIGHT", 40.0, max_value=300.0),
        window_margin=_env_float("REPOVERSE_WINDOW_MARGIN", 10.0, max_value=100.0),
        floor_height=_env_float("REPOVERSE_FLOOR_HEIGHT", 10.0, min_value=2.0, max_value=100.0),
        window_probability=_env_float("REPOVERSE_WINDOW_PROBABILITY", 0.7, max_value=1.0),
        beacon_popularity_threshold=_env_int("REPOVERSE_BEACON_POPULARITY_THRESHOLD", 10),
        beacon_fork_threshold=_env_int("REPOVERSE_BEACON_FORK_THRESHOLD", 5),
        star_count=_env_int("REPOVERSE_STAR_COUNT", 30, max_value=500),
    )


__all__ = ["SceneTuning", "default_tuning"]
