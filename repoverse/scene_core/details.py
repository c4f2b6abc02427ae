from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from repoverse.scene_core.models import Entity
from repoverse.scene_core.tuning import SceneTuning


class RandomSource(Protocol):
    def uniform(self, low: float, high: float) -> float:
        ...

    def chance(self, probability: float) -> bool:
        ...


class SeededRandomSource:
    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)

    def chance(self, probability: float) -> bool:
        return self._rng.random() < probability


class SystemRandomSource(SeededRandomSource):
    """Unseeded source; cosmetic detail differs between runs."""

    def __init__(self) -> None:
        super().__init__(None)


class SequenceRandomSource:
    """Replays fixed draws in [0, 1) in a loop; lets tests pin cosmetic detail."""

    def __init__(self, draws: Iterable[float]) -> None:
        self._draws = [float(value) for value in draws]
        if not self._draws:
            raise ValueError("sequence source requires at least one draw")
        self._cursor = 0

    def _next(self) -> float:
        value = self._draws[self._cursor % len(self._draws)]
        self._cursor += 1
        return value

    def uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self._next()

    def chance(self, probability: float) -> bool:
        return self._next() < probability


@dataclass(frozen=True)
class WindowMark:
    floor: int
    face: str


@dataclass(frozen=True)
class Beacon:
    blink_duration_s: float


@dataclass
class DetailSet:
    windows: list[WindowMark] = field(default_factory=list)
    beacon: Beacon | None = None
    ring: bool = False

    @property
    def floor_count(self) -> int:
        return len({mark.floor for mark in self.windows})


def building_dimensions(entity: Entity) -> tuple[float, float]:
    size_factor = min(entity.size_metric / 500, 1) * 0.5 + 0.5
    half_width = 15 * size_factor
    base_height = 20.0
    raw_height = min(entity.size_metric / 50, 200) + entity.popularity_score * 5
    height = max(base_height, min(raw_height, 300.0))
    return (half_width, height)


def floor_count(height: float, tuning: SceneTuning) -> int:
    if height <= tuning.window_min_height:
        return 0
    return max(0, int(math.floor((height - tuning.window_margin) / tuning.floor_height)))


def has_beacon(entity: Entity, tuning: SceneTuning) -> bool:
    return (
        entity.popularity_score > tuning.beacon_popularity_threshold
        or entity.fork_score > tuning.beacon_fork_threshold
    )


def synthesize_building_details(
    entity: Entity,
    height: float,
    source: RandomSource,
    tuning: SceneTuning,
) -> DetailSet:
    windows: list[WindowMark] = []
    for floor in range(floor_count(height, tuning)):
        for face in ("right", "left"):
            if source.chance(tuning.window_probability):
                windows.append(WindowMark(floor=floor, face=face))

    beacon = None
    if has_beacon(entity, tuning):
        beacon = Beacon(blink_duration_s=source.uniform(1.0, 3.0))
    return DetailSet(windows=windows, beacon=beacon)


def synthesize_planet_details(entity: Entity) -> DetailSet:
    return DetailSet(ring=str(entity.texture).strip().lower() == "ringed")


@dataclass(frozen=True)
class Star:
    x: float
    y: float
    radius: float
    opacity: float


def star_field(source: RandomSource, count: int, width: float, height: float) -> list[Star]:
    return [
        Star(
            x=source.uniform(0.0, width),
            y=source.uniform(0.0, height),
            radius=source.uniform(0.0, 1.5),
            opacity=source.uniform(0.0, 1.0),
        )
        for _ in range(max(0, int(count)))
    ]


__all__ = [
    "Beacon",
    "DetailSet",
    "RandomSource",
    "SeededRandomSource",
    "SequenceRandomSource",
    "Star",
    "SystemRandomSource",
    "WindowMark",
    "building_dimensions",
    "floor_count",
    "has_beacon",
    "star_field",
    "synthesize_building_details",
    "synthesize_planet_details",
]
