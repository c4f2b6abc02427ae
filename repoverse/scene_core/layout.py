from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from repoverse.scene_core.models import Entity


@dataclass(frozen=True)
class LayoutSlot:
    index: int
    entity: Entity
    row: int
    col: int
    gx: float
    gy: float

    @property
    def depth(self) -> float:
        return self.gx + self.gy


def grid_size(count: int) -> int:
    if count <= 0:
        return 0
    return int(math.ceil(math.sqrt(count)))


def grid_layout(entities: Sequence[Entity]) -> list[LayoutSlot]:
    """Assign grid cells and return slots in painter's order (far first).

    ``sorted`` is stable, so entities sharing a depth keep their input order.
    """
    size = grid_size(len(entities))
    slots: list[LayoutSlot] = []
    for idx, entity in enumerate(entities):
        row = idx // size
        col = idx % size
        slots.append(
            LayoutSlot(
                index=idx,
                entity=entity,
                row=row,
                col=col,
                gx=col - size / 2,
                gy=row - size / 2,
            )
        )
    return sorted(slots, key=lambda slot: slot.depth)


def orbital_offsets(periods: Sequence[float]) -> list[float]:
    """Negative ``begin`` offsets that spread identical orbits around the ellipse."""
    count = len(periods)
    if count == 0:
        return []
    return [-(idx * (float(period) / count)) for idx, period in enumerate(periods)]


__all__ = ["LayoutSlot", "grid_layout", "grid_size", "orbital_offsets"]
