from __future__ import annotations

import math
from dataclasses import dataclass

from repoverse.scene_core.nodes import fmt_num


@dataclass(frozen=True)
class IsoProjector:
    """Diamond-grid projection: depth grows down the screen as gx + gy grows."""

    scale: float = 24.0
    width: float = 800.0
    offset_y: float = 600.0 / 1.8

    def project(self, gx: float, gy: float, elevation: float = 0.0) -> tuple[float, float]:
        x = (gx - gy) * self.scale + self.width / 2
        y = (gx + gy) * (self.scale / 2) - elevation + self.offset_y
        return (x, y)


@dataclass(frozen=True)
class OrbitalProjector:
    center_x: float = 400.0
    center_y: float = 300.0
    squash: float = 0.4

    def radii(self, radius: float) -> tuple[float, float]:
        return (radius, radius * self.squash)

    def point(self, radius: float, theta: float) -> tuple[float, float]:
        rx, ry = self.radii(radius)
        return (self.center_x + rx * math.cos(theta), self.center_y + ry * math.sin(theta))

    def path_data(self, radius: float) -> str:
        # Two half-ellipse arcs, clockwise on screen, starting at the rightmost point.
        rx, ry = self.radii(radius)
        right = self.center_x + rx
        left = self.center_x - rx
        cy = self.center_y
        return (
            f"M {fmt_num(right)} {fmt_num(cy)} "
            f"A {fmt_num(rx)} {fmt_num(ry)} 0 1 1 {fmt_num(left)} {fmt_num(cy)} "
            f"A {fmt_num(rx)} {fmt_num(ry)} 0 1 1 {fmt_num(right)} {fmt_num(cy)}"
        )


__all__ = ["IsoProjector", "OrbitalProjector"]
