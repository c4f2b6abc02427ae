from __future__ import annotations

import logging
from typing import Sequence

from repoverse.scene_core.cityscape import build_cityscape_scene
from repoverse.scene_core.details import RandomSource
from repoverse.scene_core.document import BuiltScene
from repoverse.scene_core.models import Entity, Viewer, validate_scene_inputs
from repoverse.scene_core.nodes import serialize
from repoverse.scene_core.orbital import build_orbital_scene
from repoverse.scene_core.tuning import SceneTuning, default_tuning

logger = logging.getLogger("repoverse.assembler")


def build_scene(
    style: str,
    viewer: Viewer,
    entities: Sequence[Entity],
    *,
    tuning: SceneTuning | None = None,
    source: RandomSource | None = None,
) -> BuiltScene:
    """Validate inputs, then compose the scene tree for ``style``.

    Validation runs first so bad speeds or sizes surface as a single
    ``SceneBuildError`` instead of NaN geometry.
    """
    clean_style = str(style or "").strip().lower()
    rows = list(entities)
    tuning = tuning or default_tuning()
    validate_scene_inputs(viewer, rows, clean_style, duration_k=tuning.orbit_duration_k)

    if clean_style == "cityscape":
        return build_cityscape_scene(viewer, rows, tuning=tuning, source=source)
    return build_orbital_scene(viewer, rows, tuning=tuning)


def render_scene(
    style: str,
    viewer: Viewer,
    entities: Sequence[Entity],
    *,
    tuning: SceneTuning | None = None,
    source: RandomSource | None = None,
) -> str:
    built = build_scene(style, viewer, entities, tuning=tuning, source=source)
    document = serialize(built.root)
    logger.info("Assembler: rendered %s scene for '%s' (%d chars)", built.style, viewer.display_name, len(document))
    return document


def render_cityscape_svg(
    viewer: Viewer,
    entities: Sequence[Entity],
    *,
    tuning: SceneTuning | None = None,
    source: RandomSource | None = None,
) -> str:
    return render_scene("cityscape", viewer, entities, tuning=tuning, source=source)


def render_orbital_svg(viewer: Viewer, entities: Sequence[Entity], *, tuning: SceneTuning | None = None) -> str:
    return render_scene("orbital", viewer, entities, tuning=tuning)


__all__ = ["build_scene", "render_cityscape_svg", "render_orbital_svg", "render_scene"]
