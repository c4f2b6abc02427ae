from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

MOODS = ("happy", "focused", "calm", "stressed", "energetic")
TEXTURES = ("plain", "ringed")
DEFAULT_MOOD = "calm"
DEFAULT_TEXTURE = "plain"

SCENE_STYLES = ("orbital", "cityscape")

# upper bound for orbit and planet radii, in scene units
MAX_GEOMETRY = 1e6
DEFAULT_DURATION_K = 1000.0


@dataclass(frozen=True)
class Entity:
    name: str
    link_url: str
    primary_language: str = ""
    popularity_score: int = 0
    fork_score: int = 0
    size_metric: float = 0.0
    mood: str = DEFAULT_MOOD
    texture: str = DEFAULT_TEXTURE
    orbit_radius: float = 100.0
    orbit_speed: float = 10.0
    visual_radius: float = 8.0
    color_hex: str = "#00C2FF"


@dataclass(frozen=True)
class Viewer:
    display_name: str
    avatar_image_url: str = ""
    follower_count: int = 0
    public_item_count: int = 0


@dataclass
class SceneBuildError(ValueError):
    code: str
    message: str
    detail: dict[str, Any]

    def __str__(self) -> str:
        return self.message


def _reject(code: str, message: str, **detail: Any) -> None:
    raise SceneBuildError(code=code, message=message, detail=detail)


def _check_number(
    value: Any,
    field: str,
    index: int,
    *,
    positive: bool = False,
    integer: bool = False,
    maximum: float | None = None,
) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _reject("invalid_number", f"entity {index} field '{field}' must be numeric", index=index, field=field)
    if integer and not isinstance(value, int):
        _reject("invalid_integer", f"entity {index} field '{field}' must be a whole number", index=index, field=field, value=value)
    if isinstance(value, float) and not math.isfinite(value):
        _reject("non_finite_number", f"entity {index} field '{field}' must be finite", index=index, field=field)
    if positive and value <= 0:
        _reject("non_positive_value", f"entity {index} field '{field}' must be > 0", index=index, field=field, value=value)
    if value < 0:
        _reject("negative_value", f"entity {index} field '{field}' must be >= 0", index=index, field=field, value=value)
    if maximum is not None and value > maximum:
        _reject(
            "value_out_of_range",
            f"entity {index} field '{field}' must be <= {maximum:g}",
            index=index,
            field=field,
            value=value,
            maximum=maximum,
        )


def validate_entity(
    entity: Entity,
    index: int,
    *,
    style: str = "cityscape",
    duration_k: float = DEFAULT_DURATION_K,
) -> None:
    if not str(entity.name or "").strip():
        _reject("missing_identity", f"entity {index} requires a name", index=index, field="name")
    if not str(entity.link_url or "").strip():
        _reject("missing_identity", f"entity {index} requires a link url", index=index, field="link_url")
    _check_number(entity.popularity_score, "popularity_score", index, integer=True)
    _check_number(entity.fork_score, "fork_score", index, integer=True)
    _check_number(entity.size_metric, "size_metric", index)
    if style == "orbital":
        _check_number(entity.orbit_radius, "orbit_radius", index, maximum=MAX_GEOMETRY)
        _check_number(entity.visual_radius, "visual_radius", index, maximum=MAX_GEOMETRY)
        _check_number(entity.orbit_speed, "orbit_speed", index, positive=True)
        duration = duration_k / entity.orbit_speed
        if not math.isfinite(duration):
            _reject(
                "value_out_of_range",
                f"entity {index} field 'orbit_speed' is too small for a finite orbit period",
                index=index,
                field="orbit_speed",
                value=entity.orbit_speed,
            )


def validate_scene_inputs(
    viewer: Viewer,
    entities: list[Entity],
    style: str,
    *,
    duration_k: float = DEFAULT_DURATION_K,
) -> None:
    """Reject anything the projection/timeline math cannot handle.

    Unknown mood and texture tags are left alone: they degrade to the
    fallback palette / plain texture instead of failing the build.
    """
    if style not in SCENE_STYLES:
        _reject("unknown_scene_style", f"unsupported scene style '{style}'", style=style, supported=list(SCENE_STYLES))
    if not str(viewer.display_name or "").strip():
        _reject("missing_identity", "viewer requires a display name", field="display_name")
    for index, entity in enumerate(entities):
        validate_entity(entity, index, style=style, duration_k=duration_k)


def _pick(payload: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def _whole(value: Any) -> Any:
    # JSON integers may arrive as 3.0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def entity_from_payload(payload: dict[str, Any]) -> Entity:
    return Entity(
        name=str(_pick(payload, "name", default="")),
        link_url=str(_pick(payload, "linkUrl", "link_url", default="")),
        primary_language=str(_pick(payload, "primaryLanguage", "primary_language", default="")),
        popularity_score=_whole(_pick(payload, "popularityScore", "popularity_score", default=0)),
        fork_score=_whole(_pick(payload, "forkScore", "fork_score", default=0)),
        size_metric=_pick(payload, "sizeMetric", "size_metric", default=0),
        mood=str(_pick(payload, "mood", default=DEFAULT_MOOD)),
        texture=str(_pick(payload, "texture", default=DEFAULT_TEXTURE)),
        orbit_radius=_pick(payload, "orbitRadius", "orbit_radius", default=100.0),
        orbit_speed=_pick(payload, "orbitSpeed", "orbit_speed", default=10.0),
        visual_radius=_pick(payload, "visualRadius", "visual_radius", default=8.0),
        color_hex=str(_pick(payload, "colorHex", "color_hex", default="#00C2FF")),
    )


def viewer_from_payload(payload: dict[str, Any]) -> Viewer:
    return Viewer(
        display_name=str(_pick(payload, "displayName", "display_name", default="")),
        avatar_image_url=str(_pick(payload, "avatarImageUrl", "avatar_image_url", default="")),
        follower_count=int(_pick(payload, "followerCount", "follower_count", default=0)),
        public_item_count=int(_pick(payload, "publicItemCount", "public_item_count", default=0)),
    )


__all__ = [
    "DEFAULT_MOOD",
    "DEFAULT_TEXTURE",
    "Entity",
    "MOODS",
    "SCENE_STYLES",
    "SceneBuildError",
    "TEXTURES",
    "Viewer",
    "entity_from_payload",
    "validate_entity",
    "validate_scene_inputs",
    "viewer_from_payload",
]
