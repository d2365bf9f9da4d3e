"""Rendering adapter protocol, arc path generation and a recording renderer."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .config import Options
    from .segment import Segment

# Sweeps this close to a full turn are drawn as a closed ring.
_FULL_TURN = 2 * math.pi - 1e-6
_HALF_PI = math.pi / 2


@dataclass(frozen=True)
class ArcGeometry:
    """Arc geometry in radians, measured clockwise from 12 o'clock."""

    inner_radius: float
    outer_radius: float
    start_angle: float
    end_angle: float


def _fmt(x: float) -> str:
    # Avoid "-0" and float noise in path output.
    x = round(x, 6) + 0.0
    return f"{x:g}"


def arc_path(geometry: ArcGeometry) -> str:
    """Return an SVG path descriptor for *geometry*, centred on the origin.

    An inner radius of 0 draws a wedge to the centre. A sweep of a full turn
    or more draws a complete ring (or disc).

    >>> arc_path(ArcGeometry(0, 10, 0, math.pi / 2))
    'M0,-10A10,10 0 0,1 10,0L0,0Z'
    """
    r0 = geometry.inner_radius
    r1 = geometry.outer_radius
    a0 = geometry.start_angle - _HALF_PI
    a1 = geometry.end_angle - _HALF_PI
    sweep = abs(a1 - a0)
    large = "0" if sweep < math.pi else "1"
    f = _fmt

    if sweep >= _FULL_TURN:
        ring = f"M0,{f(r1)}A{f(r1)},{f(r1)} 0 1,1 0,{f(-r1)}A{f(r1)},{f(r1)} 0 1,1 0,{f(r1)}"
        if r0:
            ring += f"M0,{f(r0)}A{f(r0)},{f(r0)} 0 1,0 0,{f(-r0)}A{f(r0)},{f(r0)} 0 1,0 0,{f(r0)}"
        return ring + "Z"

    c0, s0 = math.cos(a0), math.sin(a0)
    c1, s1 = math.cos(a1), math.sin(a1)
    path = (
        f"M{f(r1 * c0)},{f(r1 * s0)}"
        f"A{f(r1)},{f(r1)} 0 {large},1 {f(r1 * c1)},{f(r1 * s1)}"
    )
    if r0:
        path += (
            f"L{f(r0 * c1)},{f(r0 * s1)}"
            f"A{f(r0)},{f(r0)} 0 {large},0 {f(r0 * c0)},{f(r0 * s0)}"
        )
    else:
        path += "L0,0"
    return path + "Z"


@runtime_checkable
class Renderer(Protocol):

    def setup(
        self,
        options: Options,
        segments: list[Segment],
        styles: dict[str, str],
        classes: tuple[str, ...],
    ) -> None: ...

    def draw_arc(self, geometry: ArcGeometry) -> Any: ...

    def set_attribute(self, segment: Segment, name: str, value: Any) -> None: ...

    def set_style(self, segment: Segment, name: str, value: Any) -> None: ...

    def set_text(self, text: Any) -> None: ...


@dataclass
class RecordingRenderer:
    """Renderer that keeps the latest output per segment in memory.

    Attributes and styles are keyed by segment ``data_name``. Useful as a
    headless default and for inspecting what a run produced.
    """

    width: float = 0.0
    height: float = 0.0
    text: Any = None
    label_styles: dict[str, str] = field(default_factory=dict)
    label_classes: tuple[str, ...] = ()
    attributes: dict[str, dict[str, Any]] = field(default_factory=dict)
    styles: dict[str, dict[str, Any]] = field(default_factory=dict)
    updates: int = 0

    def setup(self, options, segments, styles, classes) -> None:
        self.width = options.width
        self.height = options.height
        self.label_styles = dict(styles)
        self.label_classes = tuple(classes)
        self.text = None
        self.attributes = {s.data_name: {} for s in segments}
        self.styles = {s.data_name: {} for s in segments}
        self.updates = 0

    def draw_arc(self, geometry: ArcGeometry) -> str:
        return arc_path(geometry)

    def set_attribute(self, segment, name, value) -> None:
        self.attributes.setdefault(segment.data_name, {})[name] = value
        self.updates += 1

    def set_style(self, segment, name, value) -> None:
        self.styles.setdefault(segment.data_name, {})[name] = value
        self.updates += 1

    def set_text(self, text) -> None:
        self.text = text
