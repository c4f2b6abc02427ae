from __future__ import annotations

from dataclasses import replace

from repoverse.scene_core.details import (
    SeededRandomSource,
    SequenceRandomSource,
    building_dimensions,
    floor_count,
    has_beacon,
    star_field,
    synthesize_building_details,
    synthesize_planet_details,
)
from repoverse.scene_core.models import Entity
from repoverse.scene_core.tuning import default_tuning


def _entity(**overrides) -> Entity:
    return Entity(name="demo", link_url="https://github.com/demo/demo", **overrides)


def test_building_dimensions_clamp_height_and_scale_width() -> None:
    assert building_dimensions(_entity()) == (7.5, 20.0)
    assert building_dimensions(_entity(size_metric=500)) == (15.0, 20.0)
    half_width, height = building_dimensions(_entity(size_metric=100_000, popularity_score=50))
    assert half_width == 15.0
    assert height == 300.0
    assert building_dimensions(_entity(popularity_score=10))[1] == 50.0


def test_floor_count_requires_tall_building() -> None:
    tuning = default_tuning()
    assert floor_count(40, tuning) == 0
    assert floor_count(41, tuning) == 3
    assert floor_count(50, tuning) == 4


def test_beacon_threshold_is_strict() -> None:
    tuning = default_tuning()
    assert has_beacon(_entity(popularity_score=0), tuning) is False
    assert has_beacon(_entity(popularity_score=10), tuning) is False
    assert has_beacon(_entity(popularity_score=11), tuning) is True
    assert has_beacon(_entity(fork_score=6), tuning) is True


def test_window_draws_follow_probability() -> None:
    tuning = default_tuning()
    # 4 floors x 2 faces: only draws below 0.7 light a window
    source = SequenceRandomSource([0.1, 0.9, 0.5, 0.69, 0.7, 0.0, 0.99, 0.3])
    details = synthesize_building_details(_entity(), 50.0, source, tuning)
    assert [(mark.floor, mark.face) for mark in details.windows] == [
        (0, "right"),
        (1, "right"),
        (1, "left"),
        (2, "left"),
        (3, "left"),
    ]
    assert details.beacon is None


def test_short_building_has_no_windows_but_popular_one_blinks() -> None:
    tuning = default_tuning()
    source = SequenceRandomSource([0.5])
    details = synthesize_building_details(_entity(popularity_score=11), 20.0, source, tuning)
    assert details.windows == []
    assert details.beacon is not None
    assert details.beacon.blink_duration_s == 2.0


def test_window_probability_is_tunable() -> None:
    tuning = replace(default_tuning(), window_probability=0.0)
    details = synthesize_building_details(_entity(), 120.0, SeededRandomSource(7), tuning)
    assert details.windows == []


def test_seeded_details_are_reproducible() -> None:
    tuning = default_tuning()
    entity = _entity(size_metric=4000, popularity_score=30)
    first = synthesize_building_details(entity, 200.0, SeededRandomSource(42), tuning)
    second = synthesize_building_details(entity, 200.0, SeededRandomSource(42), tuning)
    assert first == second
    assert 1.0 <= first.beacon.blink_duration_s <= 3.0


def test_planet_ring_follows_texture() -> None:
    assert synthesize_planet_details(_entity(texture="ringed")).ring is True
    assert synthesize_planet_details(_entity(texture="plain")).ring is False
    assert synthesize_planet_details(_entity(texture="bumpy")).ring is False


def test_star_field_stays_inside_bounds() -> None:
    stars = star_field(SeededRandomSource(3), 30, 800, 360)
    assert len(stars) == 30
    assert all(0 <= star.x <= 800 and 0 <= star.y <= 360 for star in stars)
    assert star_field(SeededRandomSource(3), 0, 800, 360) == []
