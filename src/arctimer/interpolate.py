"""Per-tick attribute interpolation with resumable sub-ranges.

A run (or a resumed part of one) covers the logical timeline from
``start_at`` to ``finish_at``. Each quantity is first re-anchored at
``start_at`` and then interpolated towards its final value, so a run that
restarts from the progress it was paused at continues without a jump.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Callable

from .errors import StyleError

if TYPE_CHECKING:
    from .segment import Segment

Interpolator = Callable[[float], Any]

# Numeric attribute -> (start getter, finish getter). Angles are in radians.
_NUMERIC = {
    "end_angle": (lambda s: s.start_angle, lambda s: s.finish_angle),
    "inner_radius": (lambda s: s.start.inner_radius, lambda s: s.finish.inner_radius),
    "outer_radius": (lambda s: s.start.outer_radius, lambda s: s.finish.outer_radius),
    "value": (lambda s: s.start.value, lambda s: s.finish.value),
}


def lerp(a: float, b: float) -> Interpolator:
    return lambda x: a + (b - a) * x


_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")


def _hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    check_color(hex_color)
    hex_color = hex_color.lstrip("#")
    if len(hex_color) == 3:
        hex_color = "".join(c * 2 for c in hex_color)
    return (int(hex_color[0:2], 16), int(hex_color[2:4], 16), int(hex_color[4:6], 16))


def check_color(color: Any) -> str:
    """Return *color* if it is a ``#rgb`` or ``#rrggbb`` string, else raise ``StyleError``."""
    if not isinstance(color, str) or not _HEX_COLOR.fullmatch(color):
        raise StyleError(f"invalid fill color {color!r}, expected #rgb or #rrggbb")
    return color


def _rgb_to_hex(rgb: tuple[int, int, int]) -> str:
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def lerp_color(a_hex: str, b_hex: str) -> Interpolator:
    """Interpolate two ``#rrggbb`` (or ``#rgb``) colors in RGB space."""
    a = _hex_to_rgb(a_hex)
    b = _hex_to_rgb(b_hex)

    def at(x: float) -> str:
        return _rgb_to_hex(tuple(int(round(ac + (bc - ac) * x)) for ac, bc in zip(a, b)))

    return at


def ranged(a, b, start_at: float, interpolate: Callable = lerp) -> Interpolator:
    """Interpolate from the value at *start_at* to the final value *b*.

    >>> ranged(0, 100, 0.5)(0.5)
    75.0
    """
    full = interpolate(a, b)
    return interpolate(full(start_at), full(1))


def interpolators(segment: Segment, start_at: float) -> dict[str, Interpolator]:
    """Ranged interpolators for every non-static numeric attribute."""
    return {
        name: ranged(first(segment), last(segment), start_at)
        for name, (first, last) in _NUMERIC.items()
        if not segment.is_static(name)
    }


def fill_interpolator(segment: Segment, start_at: float) -> Interpolator:
    if segment.is_static("fill"):
        fill = segment.start.fill
        return lambda x: fill
    return ranged(segment.start.fill, segment.finish.fill, start_at, lerp_color)


def compute_tick(segment: Segment, start_at: float, finish_at: float, t: float) -> dict[str, Any]:
    """Values of every non-static attribute at tick fraction *t*."""
    x = t * finish_at
    values = {name: fn(x) for name, fn in interpolators(segment, start_at).items()}
    if not segment.is_static("fill"):
        values["fill"] = fill_interpolator(segment, start_at)(x)
    return values


def progress_at(start_at: float, finish_at: float, t: float) -> float:
    return start_at + (1 - start_at) * t * finish_at
