"""Declarative animation schedules: fade-in stagger, HUD highlight cycle, orbits.

Every function here returns plain numbers; the assemblers turn them into
``<animate>`` nodes. Speeds and durations are validated before they reach
this module, so division by zero is not handled here.
"""

from __future__ import annotations

from dataclasses import dataclass

from repoverse.scene_core.nodes import fmt_num


@dataclass(frozen=True)
class Keyframes:
    values: tuple[float, ...]
    key_times: tuple[float, ...]

    def render_values(self) -> str:
        return "; ".join(fmt_num(value, 6) for value in self.values)

    def render_key_times(self) -> str:
        return "; ".join(fmt_num(value, 6) for value in self.key_times)


@dataclass(frozen=True)
class FadeIn:
    begin_s: float
    duration_s: float


@dataclass(frozen=True)
class HudWindow:
    index: int
    start: float
    end: float
    keyframes: Keyframes


def fade_in(index: int, step_s: float = 0.05, duration_s: float = 0.8) -> FadeIn:
    return FadeIn(begin_s=index * step_s, duration_s=duration_s)


def hud_cycle_duration(count: int, per_entity_s: float = 4.0, min_cycle_s: float = 10.0) -> float:
    return max(count * per_entity_s, min_cycle_s)


def hud_schedule(count: int, epsilon: float = 0.001) -> list[HudWindow]:
    """Split one normalized cycle into ``count`` back-to-back highlight windows.

    Entity ``i`` owns ``[i/count, (i+1)/count]``. Opacity ramps over ``epsilon``
    at each boundary so exactly one window is at full opacity at any instant.
    The first window has no leading off segment and the last has no trailing
    one, which keeps the wrap from 1 back to 0 seamless.
    """
    windows: list[HudWindow] = []
    if count <= 0:
        return windows
    if count == 1:
        # a lone entity stays lit for the whole cycle rather than ramping off at the wrap
        return [HudWindow(index=0, start=0.0, end=1.0, keyframes=Keyframes((1.0, 1.0), (0.0, 1.0)))]

    # ramps must stay inside their window even for very large counts
    epsilon = min(epsilon, 1.0 / (4 * count))
    for idx in range(count):
        start = idx / count
        end = (idx + 1) / count
        if idx == 0:
            frames = Keyframes((1.0, 1.0, 0.0, 0.0), (0.0, end - epsilon, end, 1.0))
        elif idx == count - 1:
            frames = Keyframes((0.0, 0.0, 1.0, 1.0), (0.0, start, start + epsilon, 1.0))
        else:
            frames = Keyframes(
                (0.0, 0.0, 1.0, 1.0, 0.0, 0.0),
                (0.0, start, start + epsilon, end - epsilon, end, 1.0),
            )
        windows.append(HudWindow(index=idx, start=start, end=end, keyframes=frames))
    return windows


def highlight_opacity(frames: Keyframes, t: float) -> float:
    """Sample keyframes at normalized time ``t`` with linear interpolation."""
    times = frames.key_times
    values = frames.values
    if t <= times[0]:
        return values[0]
    for idx in range(len(times) - 1):
        lo, hi = times[idx], times[idx + 1]
        if lo <= t <= hi:
            if hi == lo:
                return values[idx + 1]
            ratio = (t - lo) / (hi - lo)
            return values[idx] + (values[idx + 1] - values[idx]) * ratio
    return values[-1]


def progress_track(window: HudWindow, full_width: float = 200.0) -> Keyframes:
    """Progress bar that fills across the owning window and resets each cycle."""
    if window.start <= 0.0 and window.end >= 1.0:
        return Keyframes((0.0, full_width), (0.0, 1.0))
    if window.start <= 0.0:
        return Keyframes((0.0, full_width, full_width), (0.0, window.end, 1.0))
    if window.end >= 1.0:
        return Keyframes((0.0, 0.0, full_width), (0.0, window.start, 1.0))
    return Keyframes(
        (0.0, 0.0, full_width, full_width),
        (0.0, window.start, window.end, 1.0),
    )


def orbital_duration(speed: float, k: float = 1000.0) -> float:
    return k / speed


def scale_oscillation() -> Keyframes:
    # Path starts at the right edge and runs clockwise: front (bottom) at 1/4, back (top) at 3/4.
    return Keyframes((1.0, 1.3, 1.0, 0.7, 1.0), (0.0, 0.25, 0.5, 0.75, 1.0))


__all__ = [
    "FadeIn",
    "HudWindow",
    "Keyframes",
    "fade_in",
    "highlight_opacity",
    "hud_cycle_duration",
    "hud_schedule",
    "orbital_duration",
    "progress_track",
    "scale_oscillation",
]
