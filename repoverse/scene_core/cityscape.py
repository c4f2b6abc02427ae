from __future__ import annotations

import logging
from typing import Sequence

from repoverse.scene_core.details import (
    DetailSet,
    RandomSource,
    SystemRandomSource,
    building_dimensions,
    star_field,
    synthesize_building_details,
)
from repoverse.scene_core.document import (
    BuiltScene,
    external_link,
    gradient_stops,
    paint_id,
    path_data,
    seconds,
    svg_root,
)
from repoverse.scene_core.layout import LayoutSlot, grid_layout, grid_size
from repoverse.scene_core.models import Entity, Viewer
from repoverse.scene_core.nodes import SceneNode, node
from repoverse.scene_core.projection import IsoProjector
from repoverse.scene_core.theme import PALETTES, Palette, palette_key
from repoverse.scene_core.timeline import fade_in
from repoverse.scene_core.tuning import SceneTuning, default_tuning

logger = logging.getLogger("repoverse.cityscape")

BEACON_HEIGHT = 20.0
FOOTER_TEXT = "GENERATED BY REPOVERSE"


def _mood_gradients(mood: str, palette: Palette) -> list[SceneNode]:
    return [
        node(
            "linearGradient",
            *gradient_stops(("0%", palette.base, 0.8), ("100%", "#050510", 0.9)),
            id=paint_id("gradLeft", mood),
            x1="0%",
            y1="0%",
            x2="100%",
            y2="100%",
        ),
        node(
            "linearGradient",
            *gradient_stops(("0%", palette.base, 0.6), ("100%", "#0b0b1a", 0.8)),
            id=paint_id("gradRight", mood),
            x1="0%",
            y1="0%",
            x2="0%",
            y2="100%",
        ),
    ]


def _defs(moods: list[str]) -> SceneNode:
    defs = node(
        "defs",
        node(
            "linearGradient",
            *gradient_stops(("0%", "#0f0c29", None), ("50%", "#302b63", None), ("100%", "#24243e", None)),
            id="skyGradient",
            x1="0%",
            y1="0%",
            x2="0%",
            y2="100%",
        ),
        node(
            "pattern",
            node("path", d="M 40 0 L 0 0 0 20", fill="none", stroke="magenta", stroke_width=0.5, opacity=0.2),
            id="gridPattern",
            width=40,
            height=20,
            patternUnits="userSpaceOnUse",
        ),
        node(
            "radialGradient",
            *gradient_stops(("0%", "#ff00cc", 0.15), ("100%", "transparent", None)),
            id="floorGlow",
            cx="50%",
            cy="100%",
            r="80%",
        ),
    )
    for mood in moods:
        defs.extend(_mood_gradients(mood, PALETTES[mood]))
    return defs


def _background(tuning: SceneTuning, source: RandomSource) -> list[SceneNode]:
    width, height = tuning.width, tuning.height
    rows = [node("rect", width="100%", height="100%", fill="url(#skyGradient)")]
    for star in star_field(source, tuning.star_count, width, height * 0.6):
        rows.append(node("circle", cx=star.x, cy=star.y, r=star.radius, fill="white", opacity=star.opacity))
    rows.append(
        node(
            "g",
            node(
                "rect",
                x=-width,
                y=0,
                width=width * 3,
                height=height * 2,
                fill="url(#gridPattern)",
                opacity=0.3,
                transform=f"rotate(45, {width / 2:g}, 0)",
            ),
            transform=f"translate(0, {height / 2:g}) scale(1, 0.5)",
        )
    )
    rows.append(node("rect", x=0, y=height / 2, width=width, height=height / 2, fill="url(#floorGlow)"))
    return rows


def _labels(viewer: Viewer) -> SceneNode:
    return node(
        "g",
        node(
            "text",
            text=f"{viewer.display_name.upper()} CITY",
            fill="cyan",
            font_family="Verdana, sans-serif",
            font_size=28,
            font_weight="900",
        ),
        node(
            "text",
            text=f"POP: {viewer.follower_count} // BLOCKS: {viewer.public_item_count}",
            y=25,
            fill="#ff00cc",
            font_family="Courier New, monospace",
            font_size=14,
            font_weight="bold",
            letter_spacing=2,
        ),
        transform="translate(40, 60)",
    )


def _window_marks(
    details: DetailSet,
    cx: float,
    cy: float,
    half_width: float,
    palette: Palette,
    tuning: SceneTuning,
) -> list[SceneNode]:
    rows: list[SceneNode] = []
    for mark in details.windows:
        wy = cy - tuning.window_margin - mark.floor * tuning.floor_height
        if mark.face == "right":
            d = path_data("M", cx + 4, wy + 2, "l", half_width - 8, 4)
            opacity = 0.6
        else:
            d = path_data("M", cx - half_width + 4, wy + 4, "l", half_width - 8, -4)
            opacity = 0.4
        rows.append(node("path", d=d, stroke=palette.highlight, stroke_width=2, stroke_opacity=opacity))
    return rows


def _beacon(details: DetailSet, cx: float, top: float, palette: Palette) -> list[SceneNode]:
    if details.beacon is None:
        return []
    tip = top - BEACON_HEIGHT
    return [
        node("line", x1=cx, y1=top, x2=cx, y2=tip, stroke=palette.highlight, stroke_width=1.5),
        node(
            "circle",
            node(
                "animate",
                attributeName="opacity",
                values="0.2;1;0.2",
                dur=seconds(details.beacon.blink_duration_s),
                repeatCount="indefinite",
            ),
            cx=cx,
            cy=tip,
            r=1.5,
            fill="white",
            class_="beacon",
        ),
    ]


def _building(
    slot: LayoutSlot,
    draw_index: int,
    projector: IsoProjector,
    source: RandomSource,
    tuning: SceneTuning,
) -> SceneNode:
    entity = slot.entity
    half_width, height = building_dimensions(entity)
    cx, cy = projector.project(slot.gx, slot.gy, 0.0)
    mood = palette_key(entity.mood)
    palette = PALETTES[mood]
    details = synthesize_building_details(entity, height, source, tuning)
    fade = fade_in(draw_index, tuning.fade_step_s, tuning.fade_duration_s)

    w = half_width
    left_face = path_data("M", cx - w, cy - height + w / 2, "l", 0, height, "l", w, w / 2, "l", 0, -height, "z")
    right_face = path_data("M", cx + w, cy - height + w / 2, "l", 0, height, "l", -w, w / 2, "l", 0, -height, "z")
    top_face = path_data("M", cx, cy - height, "l", w, w / 2, "l", -w, w / 2, "l", -w, -w / 2, "z")

    group = node(
        "g",
        node(
            "animate",
            attributeName="opacity",
            values="0;1",
            dur=seconds(fade.duration_s),
            begin=seconds(fade.begin_s),
            fill="freeze",
        ),
        node("ellipse", cx=cx, cy=cy + w / 2, rx=w * 1.5, ry=w * 0.8, fill="black", opacity=0.4),
        node("path", d=left_face, fill=f"url(#{paint_id('gradLeft', mood)})", stroke="none"),
        node("path", d=right_face, fill=f"url(#{paint_id('gradRight', mood)})", stroke="none"),
        node("path", d=top_face, fill=palette.highlight, fill_opacity=0.9, stroke="none"),
        node("path", d=left_face, fill="none", stroke=palette.base, stroke_width=0.5, opacity=0.5),
        node("path", d=right_face, fill="none", stroke=palette.base, stroke_width=0.5, opacity=0.5),
        class_="building",
        opacity=0,
    )
    group.extend(_window_marks(details, cx, cy, w, palette, tuning))
    group.extend(_beacon(details, cx, cy - height, palette))
    language = entity.primary_language or "N/A"
    group.add(node("title", text=f"{entity.name} ({language}) | Stars: {entity.popularity_score}"))
    return external_link(entity.link_url, group)


def build_cityscape_scene(
    viewer: Viewer,
    entities: Sequence[Entity],
    *,
    tuning: SceneTuning | None = None,
    source: RandomSource | None = None,
) -> BuiltScene:
    tuning = tuning or default_tuning()
    source = source or SystemRandomSource()
    projector = IsoProjector(scale=tuning.iso_scale, width=tuning.width, offset_y=tuning.iso_offset_y)

    slots = grid_layout(entities)
    moods = sorted({palette_key(entity.mood) for entity in entities})

    root = svg_root(tuning.width, tuning.height)
    root.add(_defs(moods))
    root.extend(_background(tuning, source))
    buildings = root.add(node("g", class_="buildings", transform="translate(0, 50)"))
    for draw_index, slot in enumerate(slots):
        buildings.add(_building(slot, draw_index, projector, source, tuning))
    root.add(_labels(viewer))
    root.add(
        node(
            "text",
            text=FOOTER_TEXT,
            x=tuning.width - 30,
            y=tuning.height - 20,
            text_anchor="end",
            fill="rgba(255,255,255,0.4)",
            font_family="Courier New",
            font_size=10,
        )
    )
    logger.info("Cityscape: composed %d building(s) on a %d-wide grid", len(slots), grid_size(len(slots)))
    return BuiltScene(
        style="cityscape",
        root=root,
        entity_count=len(slots),
        draw_order=[slot.index for slot in slots],
        depth_keys=[slot.depth for slot in slots],
    )


__all__ = ["build_cityscape_scene"]
