from repoverse.scene_core.assembler import build_scene, render_cityscape_svg, render_orbital_svg, render_scene
from repoverse.scene_core.details import SeededRandomSource, SequenceRandomSource, SystemRandomSource
from repoverse.scene_core.document import BuiltScene
from repoverse.scene_core.models import (
    Entity,
    SceneBuildError,
    Viewer,
    entity_from_payload,
    validate_scene_inputs,
    viewer_from_payload,
)
from repoverse.scene_core.quality import evaluate_scene
from repoverse.scene_core.theme import Palette, resolve_palette
from repoverse.scene_core.tuning import SceneTuning, default_tuning

__all__ = [
    "BuiltScene",
    "Entity",
    "Palette",
    "SceneBuildError",
    "SceneTuning",
    "SeededRandomSource",
    "SequenceRandomSource",
    "SystemRandomSource",
    "Viewer",
    "build_scene",
    "default_tuning",
    "entity_from_payload",
    "evaluate_scene",
    "render_cityscape_svg",
    "render_orbital_svg",
    "render_scene",
    "resolve_palette",
    "validate_scene_inputs",
    "viewer_from_payload",
]
