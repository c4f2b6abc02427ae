from __future__ import annotations

import logging
from typing import Sequence

from repoverse.scene_core.details import synthesize_planet_details
from repoverse.scene_core.document import (
    BuiltScene,
    external_link,
    gradient_stops,
    keyframe_animation,
    paint_id,
    seconds,
    svg_root,
)
from repoverse.scene_core.layout import orbital_offsets
from repoverse.scene_core.models import Entity, Viewer
from repoverse.scene_core.nodes import SceneNode, node
from repoverse.scene_core.projection import OrbitalProjector
from repoverse.scene_core.theme import resolve_palette
from repoverse.scene_core.timeline import (
    HudWindow,
    fade_in,
    hud_cycle_duration,
    hud_schedule,
    orbital_duration,
    progress_track,
    scale_oscillation,
)
from repoverse.scene_core.tuning import SceneTuning, default_tuning

logger = logging.getLogger("repoverse.orbital")

SUN_RADIUS = 40
HUD_FONT = "Courier New, monospace"
FOOTER_TEXT = "RepoVerse 3D"
STATIC_STARS = ((100, 100, 1, 0.5), (600, 200, 1.5, 0.7), (300, 500, 1, 0.4), (700, 400, 2, 0.6))


def _planet_gradient(color: str) -> SceneNode:
    return node(
        "radialGradient",
        *gradient_stops(("0%", color, 1), ("50%", color, 0.8), ("100%", "#000", 1)),
        id=paint_id("planetGrad", color),
        cx="30%",
        cy="30%",
        r="70%",
    )


def _defs(entities: Sequence[Entity], cx: float, cy: float) -> SceneNode:
    defs = node(
        "defs",
        node(
            "radialGradient",
            *gradient_stops(("0%", "#FDB813", None), ("80%", "#F5821F", None), ("100%", "rgba(245, 130, 31, 0)", None)),
            id="sunGradient3D",
        ),
        node(
            "filter",
            node("feGaussianBlur", stdDeviation=2.5, result="coloredBlur"),
            node("feMerge", node("feMergeNode", in_="coloredBlur"), node("feMergeNode", in_="SourceGraphic")),
            id="glow3D",
        ),
        node(
            "linearGradient",
            *gradient_stops(
                ("0%", "rgba(0,0,0,0)", None),
                ("10%", "rgba(0,20,40,0.8)", None),
                ("90%", "rgba(0,20,40,0.8)", None),
                ("100%", "rgba(0,0,0,0)", None),
            ),
            id="hudGradient3D",
            x1="0%",
            y1="0%",
            x2="100%",
            y2="0%",
        ),
        node("clipPath", node("circle", cx=cx, cy=cy, r=SUN_RADIUS), id="sunClip3D"),
    )
    seen: set[str] = set()
    for entity in entities:
        if entity.color_hex in seen:
            continue
        seen.add(entity.color_hex)
        defs.add(_planet_gradient(entity.color_hex))
    return defs


def _background(viewer: Viewer, cx: float, cy: float) -> list[SceneNode]:
    rows = [node("rect", width="100%", height="100%", fill="#030014")]
    for x, y, r, opacity in STATIC_STARS:
        rows.append(node("circle", cx=x, cy=y, r=r, fill="white", opacity=opacity))
    sun = node(
        "g",
        node(
            "circle",
            node("animate", attributeName="r", values="40;42;40", dur="4s", repeatCount="indefinite"),
            cx=cx,
            cy=cy,
            r=SUN_RADIUS,
            fill="url(#sunGradient3D)",
        ),
        filter="url(#glow3D)",
    )
    if viewer.avatar_image_url:
        sun.add(
            SceneNode(
                tag="image",
                attrs={
                    "href": viewer.avatar_image_url,
                    "xlink:href": viewer.avatar_image_url,
                    "x": cx - SUN_RADIUS,
                    "y": cy - SUN_RADIUS,
                    "height": SUN_RADIUS * 2,
                    "width": SUN_RADIUS * 2,
                    "clip-path": "url(#sunClip3D)",
                    "opacity": 0.8,
                },
            )
        )
    rows.append(sun)
    return rows


def _planet(
    entity: Entity,
    index: int,
    duration_s: float,
    offset_s: float,
    projector: OrbitalProjector,
    tuning: SceneTuning,
) -> SceneNode:
    rx, ry = projector.radii(entity.orbit_radius)
    palette = resolve_palette(entity.mood)
    details = synthesize_planet_details(entity)
    fade = fade_in(index, tuning.fade_step_s, tuning.fade_duration_s)
    scale = scale_oscillation()

    link = external_link(
        entity.link_url,
        node(
            "circle",
            node("title", text=f"{entity.name} ({entity.primary_language or 'N/A'})"),
            r=entity.visual_radius,
            fill=f"url(#{paint_id('planetGrad', entity.color_hex)})",
        ),
        node("circle", r=entity.visual_radius, fill="none", stroke=palette.base, stroke_width=2, opacity=0.3),
        style="cursor: pointer;",
    )
    if details.ring:
        link.add(
            node(
                "ellipse",
                rx=entity.visual_radius * 1.8,
                ry=entity.visual_radius * 0.5,
                fill="none",
                stroke="rgba(255,255,255,0.6)",
                stroke_width=2,
                transform="rotate(-15)",
                class_="ring",
            )
        )

    body = node(
        "g",
        node(
            "animateTransform",
            attributeName="transform",
            type="scale",
            values=scale.render_values(),
            keyTimes=scale.render_key_times(),
            dur=seconds(duration_s),
            repeatCount="indefinite",
            begin=seconds(offset_s),
            additive="sum",
        ),
        link,
    )
    mover = node(
        "g",
        node(
            "animateMotion",
            dur=seconds(duration_s),
            repeatCount="indefinite",
            begin=seconds(offset_s),
            path=projector.path_data(entity.orbit_radius),
        ),
        body,
    )
    return node(
        "g",
        node(
            "animate",
            attributeName="opacity",
            values="0;1",
            dur=seconds(fade.duration_s),
            begin=seconds(fade.begin_s),
            fill="freeze",
        ),
        node(
            "ellipse",
            cx=projector.center_x,
            cy=projector.center_y,
            rx=rx,
            ry=ry,
            fill="none",
            stroke="rgba(255,255,255,0.1)",
            stroke_width=1,
        ),
        mover,
        class_="planet",
        opacity=0,
    )


def _hud_panel(entity: Entity, window: HudWindow, cycle_s: float, height: int) -> SceneNode:
    color = resolve_palette(entity.mood).base
    language = entity.primary_language or "N/A"
    return node(
        "g",
        keyframe_animation("opacity", window.keyframes, cycle_s),
        node(
            "text",
            text=f"> {entity.name}",
            x=20,
            y=height - 80,
            fill=color,
            font_family=HUD_FONT,
            font_size=16,
            font_weight="bold",
        ),
        node(
            "text",
            text=f"LANG: {language} | STARS: {entity.popularity_score}",
            x=20,
            y=height - 60,
            fill="#ccc",
            font_family=HUD_FONT,
            font_size=12,
        ),
        node(
            "text",
            text=f"MOOD: {str(entity.mood).upper()} | SIZE: {entity.size_metric:g}kb",
            x=20,
            y=height - 45,
            fill="#ccc",
            font_family=HUD_FONT,
            font_size=12,
        ),
        node(
            "rect",
            keyframe_animation("width", progress_track(window), cycle_s),
            x=20,
            y=height - 35,
            width=0,
            height=2,
            fill=color,
        ),
        class_="hud-panel",
        opacity=0,
    )


def build_orbital_scene(
    viewer: Viewer,
    entities: Sequence[Entity],
    *,
    tuning: SceneTuning | None = None,
) -> BuiltScene:
    tuning = tuning or default_tuning()
    width, height = tuning.width, tuning.height
    cx, cy = width / 2, height / 2
    projector = OrbitalProjector(center_x=cx, center_y=cy, squash=tuning.orbit_squash)

    durations = [orbital_duration(entity.orbit_speed, tuning.orbit_duration_k) for entity in entities]
    offsets = orbital_offsets(durations)
    cycle_s = hud_cycle_duration(len(entities), tuning.hud_per_entity_s, tuning.hud_min_cycle_s)
    windows = hud_schedule(len(entities), tuning.hud_epsilon)

    root = svg_root(width, height, xlink=True)
    root.add(_defs(entities, cx, cy))
    root.extend(_background(viewer, cx, cy))
    planets = root.add(node("g", class_="planets"))
    for idx, entity in enumerate(entities):
        planets.add(_planet(entity, idx, durations[idx], offsets[idx], projector, tuning))

    root.add(
        node(
            "text",
            text=viewer.display_name,
            x=cx,
            y=cy + 70,
            text_anchor="middle",
            fill="white",
            font_family="Arial, sans-serif",
            font_size=14,
            font_weight="bold",
            opacity=0.8,
        )
    )
    root.add(
        node(
            "rect",
            x=10,
            y=height - 90,
            width=300,
            height=80,
            fill="url(#hudGradient3D)",
            stroke="rgba(0,255,255,0.2)",
            stroke_width=1,
            rx=5,
        )
    )
    for window in windows:
        root.add(_hud_panel(entities[window.index], window, cycle_s, height))
    root.add(
        node(
            "text",
            text=FOOTER_TEXT,
            x=width - 10,
            y=height - 10,
            text_anchor="end",
            fill="#333",
            font_family="Arial, sans-serif",
            font_size=10,
        )
    )
    logger.info("Orbital: composed %d planet(s), HUD cycle %.1fs", len(entities), cycle_s)
    return BuiltScene(
        style="orbital",
        root=root,
        entity_count=len(entities),
        draw_order=list(range(len(entities))),
        hud_windows=windows,
        cycle_duration_s=cycle_s,
        motion_durations_s=durations,
        time_offsets_s=offsets,
    )


__all__ = ["build_orbital_scene"]
