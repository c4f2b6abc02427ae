from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from repoverse.scene_core.nodes import SVG_NS, XLINK_NS, SceneNode, fmt_num, node
from repoverse.scene_core.timeline import HudWindow, Keyframes


@dataclass
class BuiltScene:
    style: str
    root: SceneNode
    entity_count: int
    draw_order: list[int] = field(default_factory=list)
    depth_keys: list[float] = field(default_factory=list)
    hud_windows: list[HudWindow] = field(default_factory=list)
    cycle_duration_s: float = 0.0
    motion_durations_s: list[float] = field(default_factory=list)
    time_offsets_s: list[float] = field(default_factory=list)


def svg_root(width: int, height: int, *, xlink: bool = False) -> SceneNode:
    attrs: dict[str, Any] = {
        "width": width,
        "height": height,
        "viewBox": f"0 0 {width} {height}",
        "xmlns": SVG_NS,
    }
    if xlink:
        attrs["xmlns:xlink"] = XLINK_NS
    return SceneNode(tag="svg", attrs=attrs)


def path_data(*tokens: Any) -> str:
    """Join path commands and numbers: ``path_data("M", 1.5, 2, "z")``."""
    parts: list[str] = []
    for token in tokens:
        if isinstance(token, (int, float)) and not isinstance(token, bool):
            parts.append(fmt_num(token))
        else:
            parts.append(str(token))
    return " ".join(parts)


def seconds(value: float) -> str:
    return f"{fmt_num(value)}s"


def external_link(url: str, *children: SceneNode, **attrs: Any) -> SceneNode:
    return node("a", *children, href=url, target="_blank", **attrs)


def keyframe_animation(attribute: str, frames: Keyframes, duration_s: float, **attrs: Any) -> SceneNode:
    return node(
        "animate",
        attributeName=attribute,
        values=frames.render_values(),
        keyTimes=frames.render_key_times(),
        dur=seconds(duration_s),
        repeatCount="indefinite",
        **attrs,
    )


def paint_id(prefix: str, token: str) -> str:
    return f"{prefix}-{re.sub(r'[^a-zA-Z0-9_-]+', '', token) or 'default'}"


def gradient_stops(*stops: tuple[str, str, float | None]) -> list[SceneNode]:
    rows: list[SceneNode] = []
    for offset, color, opacity in stops:
        rows.append(node("stop", offset=offset, stop_color=color, stop_opacity=opacity))
    return rows


__all__ = [
    "BuiltScene",
    "external_link",
    "gradient_stops",
    "keyframe_animation",
    "paint_id",
    "path_data",
    "seconds",
    "svg_root",
]
