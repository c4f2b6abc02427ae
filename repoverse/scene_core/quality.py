from __future__ import annotations

import math
from typing import Any

from repoverse.scene_core.document import BuiltScene
from repoverse.scene_core.timeline import highlight_opacity


def _hud_partition_checks(scene: BuiltScene, failures: list[str], checks: list[str]) -> None:
    windows = scene.hud_windows
    if len(windows) != scene.entity_count:
        failures.append("hud_window_count_mismatch")
        return
    if not windows:
        checks.append("hud_partition_empty")
        return

    if abs(windows[0].start) > 1e-9 or abs(windows[-1].end - 1.0) > 1e-9:
        failures.append("hud_partition_not_covering_cycle")
    elif all(abs(windows[idx + 1].start - windows[idx].end) < 1e-9 for idx in range(len(windows) - 1)):
        checks.append("hud_partition_contiguous")
    else:
        failures.append("hud_partition_gap_or_overlap")

    for window in windows:
        midpoint = (window.start + window.end) / 2
        lit = [row.index for row in windows if highlight_opacity(row.keyframes, midpoint) >= 1.0 - 1e-9]
        if lit != [window.index]:
            failures.append(f"hud_highlight_not_exclusive:{window.index}")
            return
    checks.append("hud_highlight_exclusive")


def _numbers_in(value: Any) -> list[float]:
    if isinstance(value, bool):
        return []
    if isinstance(value, (int, float)):
        return [float(value)]
    if isinstance(value, str):
        numbers: list[float] = []
        for token in value.replace(",", " ").replace(";", " ").split():
            try:
                numbers.append(float(token.rstrip("s")))
            except ValueError:
                continue
        return numbers
    return []


def evaluate_scene(scene: BuiltScene) -> dict[str, Any]:
    failures: list[str] = []
    warnings: list[str] = []
    checks: list[str] = []

    if scene.style == "orbital":
        _hud_partition_checks(scene, failures, checks)
        if all(duration > 0 and math.isfinite(duration) for duration in scene.motion_durations_s):
            checks.append("motion_durations_positive")
        else:
            failures.append("motion_duration_invalid")
    else:
        keys = scene.depth_keys
        if all(keys[idx] <= keys[idx + 1] for idx in range(len(keys) - 1)):
            checks.append("depth_order_non_decreasing")
        else:
            failures.append("depth_order_violated")
        if sorted(scene.draw_order) != list(range(scene.entity_count)):
            failures.append("draw_order_not_a_permutation")

    non_finite = 0
    for scene_node in scene.root.iter():
        for value in scene_node.attrs.values():
            non_finite += sum(1 for number in _numbers_in(value) if not math.isfinite(number))
    if non_finite:
        failures.append("non_finite_geometry")
    else:
        checks.append("geometry_finite")

    if scene.entity_count == 0:
        warnings.append("scene_has_no_entities")

    return {
        "ok": len(failures) == 0,
        "failures": failures,
        "warnings": warnings,
        "checks": checks,
    }


__all__ = ["evaluate_scene"]
