"""Arc segments built from raw data and timer options."""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Callable

from .config import ArcState, LabelOptions, Options, build_options
from .errors import StyleError
from .interpolate import check_color
from .render import ArcGeometry

TAU = 2 * math.pi

NAME = "ArcTimer"

# Attributes that can transition, keyed by their name on Segment.
ATTRIBUTES = ("end_angle", "inner_radius", "outer_radius", "value", "fill")


@dataclass
class Segment:
    """One animated arc.

    ``start`` and ``finish`` are fixed once built. The transient fields
    (``end_angle``, the radii, ``value``, ``fill``) track the current
    position during a run.
    """

    index: int
    data_name: str
    start: ArcState
    finish: ArcState
    start_angle: float
    finish_angle: float
    static: frozenset[str]
    values: LabelOptions
    label_styles: dict[str, str] = field(default_factory=dict)
    label_classes: tuple[str, ...] = ()
    callback: Callable | None = None
    custom: dict = field(default_factory=dict)

    end_angle: float = 0.0
    inner_radius: float = 0.0
    outer_radius: float = 0.0
    value: float = 0.0
    fill: str = ""

    def geometry(self) -> ArcGeometry:
        return ArcGeometry(
            inner_radius=self.inner_radius,
            outer_radius=self.outer_radius,
            start_angle=self.start_angle,
            end_angle=self.end_angle,
        )

    def is_static(self, name: str) -> bool:
        return name in self.static


def parse_styles(text: str | None) -> dict[str, str]:
    """Parse ``name:value;`` declarations.

    Empty declarations are skipped; anything else without exactly one
    ``:`` raises ``StyleError``.

    >>> parse_styles("text-anchor:middle;font-size:12px")
    {'text-anchor': 'middle', 'font-size': '12px'}
    """
    styles: dict[str, str] = {}
    for declaration in (text or "").split(";"):
        if not declaration.strip():
            continue
        parts = declaration.split(":")
        if len(parts) != 2:
            raise StyleError(f"invalid style {declaration!r}")
        styles[parts[0].strip()] = parts[1].strip()
    return styles


def parse_classes(text: str | None) -> tuple[str, ...]:
    return tuple(name for name in (text or "").split(" ") if name)


def _with_radii(state: ArcState, height: float) -> ArcState:
    return dataclasses.replace(
        state,
        inner_radius=height / 2 * state.inner_ratio,
        outer_radius=height / 2 * state.outer_ratio,
    )


def _static_flags(options: Options, start: ArcState, finish: ArcState) -> frozenset[str]:
    flags = {
        "end_angle": options.immediate.angle or start.angle == finish.angle,
        "inner_radius": start.inner_radius == finish.inner_radius,
        "outer_radius": start.outer_radius == finish.outer_radius,
        "value": start.value == finish.value,
        "fill": start.fill == finish.fill,
    }
    return frozenset(name for name, is_static in flags.items() if is_static)


def build_segment(index: int, raw: Mapping[str, Any], base: Options) -> Segment:
    raw = dict(raw)
    data_name = raw.pop("data_name", None) or f"{NAME}{index}"
    options = build_options(base, raw)

    start = _with_radii(options.start, base.height)
    finish = _with_radii(options.finish, base.height)
    if start.fill != finish.fill:
        # Transitioning fills are interpolated in RGB.
        check_color(start.fill)
        check_color(finish.fill)

    return Segment(
        index=index,
        data_name=data_name,
        start=start,
        finish=finish,
        start_angle=start.angle * TAU,
        finish_angle=finish.angle * TAU,
        static=_static_flags(options, start, finish),
        values=options.values,
        label_styles=parse_styles(options.values.styles),
        label_classes=parse_classes(options.values.classes),
        callback=options.callback,
        custom=options.custom,
        end_angle=finish.angle * TAU,
        inner_radius=start.inner_radius,
        outer_radius=start.outer_radius,
        value=start.value,
        fill=start.fill,
    )


def build_segments(raw_data: Sequence[Mapping[str, Any]], base: Options) -> list[Segment]:
    """Build one ``Segment`` per raw entry, merged over *base*."""
    return [build_segment(i, raw, base) for i, raw in enumerate(raw_data)]
