"""Typed scene tree serialized to SVG once, after every value is computed.

Builders never concatenate markup; they assemble ``SceneNode`` trees and hand
the root to ``serialize``. Numeric attributes are formatted here so the output
can never contain ``nan`` or ``inf``.
"""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Iterable

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"


def fmt_num(value: float, places: int = 3) -> str:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite value cannot be serialized: {value!r}")
    text = f"{round(number, places):.{places}f}".rstrip("0").rstrip(".")
    return "0" if text in {"", "-0"} else text


def _attr_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return fmt_num(value)
    if isinstance(value, (list, tuple)):
        return ";".join(_attr_text(item) for item in value)
    return str(value)


@dataclass
class SceneNode:
    tag: str
    attrs: dict[str, Any] = field(default_factory=dict)
    children: list[SceneNode] = field(default_factory=list)
    text: str | None = None

    def add(self, child: SceneNode) -> SceneNode:
        self.children.append(child)
        return child

    def extend(self, children: Iterable[SceneNode]) -> SceneNode:
        self.children.extend(children)
        return self

    def iter(self, tag: str | None = None) -> Iterable[SceneNode]:
        if tag is None or self.tag == tag:
            yield self
        for child in self.children:
            yield from child.iter(tag)

    def find_all(self, tag: str) -> list[SceneNode]:
        return list(self.iter(tag))


def node(tag: str, *children: SceneNode, text: str | None = None, **attrs: Any) -> SceneNode:
    """Shorthand builder; ``stroke_width=1`` becomes ``stroke-width="1"``.

    A trailing underscore is stripped so reserved words can be used
    (``class_="building"``). ``None`` attribute values are dropped.
    """
    clean: dict[str, Any] = {}
    for key, value in attrs.items():
        if value is None:
            continue
        clean[key.rstrip("_").replace("_", "-")] = value
    return SceneNode(tag=tag, attrs=clean, children=list(children), text=text)


def _to_element(scene_node: SceneNode) -> ET.Element:
    element = ET.Element(scene_node.tag, {key: _attr_text(value) for key, value in scene_node.attrs.items()})
    if scene_node.text is not None:
        element.text = scene_node.text
    for child in scene_node.children:
        element.append(_to_element(child))
    return element


def serialize(root: SceneNode) -> str:
    return ET.tostring(_to_element(root), encoding="unicode", short_empty_elements=True)


__all__ = ["SVG_NS", "SceneNode", "XLINK_NS", "fmt_num", "node", "serialize"]
