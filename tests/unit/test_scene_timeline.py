from __future__ import annotations

import math

from repoverse.scene_core.timeline import (
    fade_in,
    highlight_opacity,
    hud_cycle_duration,
    hud_schedule,
    orbital_duration,
    progress_track,
    scale_oscillation,
)


def test_three_entity_schedule_partitions_cycle() -> None:
    windows = hud_schedule(3)
    bounds = [windows[0].start] + [window.end for window in windows]
    assert [round(value, 9) for value in bounds] == [0, round(1 / 3, 9), round(2 / 3, 9), 1]
    assert hud_cycle_duration(3) == 12


def test_first_and_last_windows_have_four_keyframes() -> None:
    windows = hud_schedule(3)
    assert windows[0].keyframes.values == (1.0, 1.0, 0.0, 0.0)
    assert windows[-1].keyframes.values == (0.0, 0.0, 1.0, 1.0)
    assert len(windows[1].keyframes.values) == 6
    for window in windows:
        times = window.keyframes.key_times
        assert times[0] == 0.0 and times[-1] == 1.0
        assert list(times) == sorted(times)


def test_exactly_one_entity_highlighted_inside_each_window() -> None:
    windows = hud_schedule(5)
    for window in windows:
        for fraction in (0.1, 0.5, 0.9):
            t = window.start + (window.end - window.start) * fraction
            lit = [row.index for row in windows if highlight_opacity(row.keyframes, t) >= 0.999]
            assert lit == [window.index]


def test_single_entity_is_always_highlighted() -> None:
    windows = hud_schedule(1)
    assert len(windows) == 1
    assert highlight_opacity(windows[0].keyframes, 0.0) == 1.0
    assert highlight_opacity(windows[0].keyframes, 0.73) == 1.0
    assert hud_cycle_duration(1) == 10


def test_empty_schedule() -> None:
    assert hud_schedule(0) == []
    assert hud_cycle_duration(0) == 10


def test_epsilon_shrinks_for_large_counts() -> None:
    windows = hud_schedule(1000, epsilon=0.001)
    middle = windows[500].keyframes.key_times
    assert middle[1] < middle[2] < middle[3] < middle[4]


def test_rendered_keyframes_use_semicolons() -> None:
    frames = hud_schedule(2)[0].keyframes
    assert frames.render_values() == "1; 1; 0; 0"
    assert frames.render_key_times() == "0; 0.499; 0.5; 1"


def test_progress_track_fills_within_window() -> None:
    window = hud_schedule(4)[1]
    track = progress_track(window, full_width=200)
    assert highlight_opacity(track, 0.1) == 0.0
    assert math.isclose(highlight_opacity(track, 0.375), 100.0)
    assert highlight_opacity(track, 0.9) == 200.0


def test_orbital_duration_and_scale_track() -> None:
    assert orbital_duration(2) == 500
    assert orbital_duration(4, k=100) == 25
    scale = scale_oscillation()
    assert scale.values == (1.0, 1.3, 1.0, 0.7, 1.0)
    assert scale.key_times == (0.0, 0.25, 0.5, 0.75, 1.0)


def test_fade_in_staggers_by_index() -> None:
    assert fade_in(0).begin_s == 0
    assert math.isclose(fade_in(3).begin_s, 0.15)
    assert fade_in(3).duration_s == 0.8
