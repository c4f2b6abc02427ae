from __future__ import annotations

import logging
from dataclasses import dataclass

from repoverse.scene_core.models import DEFAULT_MOOD

logger = logging.getLogger("repoverse.theme")


@dataclass(frozen=True)
class Palette:
    base: str
    highlight: str
    shadow: str


PALETTES: dict[str, Palette] = {
    "happy": Palette(base="#FFD700", highlight="#FFFACD", shadow="#B8860B"),
    "focused": Palette(base="#00FF94", highlight="#E0FFF1", shadow="#008F53"),
    "calm": Palette(base="#00C2FF", highlight="#D1F4FF", shadow="#005F7F"),
    "stressed": Palette(base="#FF2A6D", highlight="#FFD1E0", shadow="#990033"),
    "energetic": Palette(base="#D300C5", highlight="#FAD7FA", shadow="#66005E"),
}


def palette_key(mood: str | None) -> str:
    token = str(mood or "").strip().lower()
    if token in PALETTES:
        return token
    if token:
        logger.warning("Theme: unknown mood '%s', using '%s' palette", mood, DEFAULT_MOOD)
    return DEFAULT_MOOD


def resolve_palette(mood: str | None) -> Palette:
    """Map a mood tag to its palette; anything unrecognised gets the calm one."""
    return PALETTES[palette_key(mood)]


__all__ = ["PALETTES", "Palette", "palette_key", "resolve_palette"]
