"""Named easing curves.

Pause and resume re-anchor each attribute at the current progress, which is
only seamless for the ``linear`` curve.
"""

from __future__ import annotations

import math
from typing import Callable

EaseFn = Callable[[float], float]


class EaseRegistry:

    def __init__(self) -> None:
        self._curves: dict[str, EaseFn] = {}

    def register(self, name_or_fn=None, fn=None):
        """Register an ease curve by name.

        Can be used as a bare decorator (``@eases.register``) or as a
        direct call (``eases.register("name", fn)``).
        """
        if callable(name_or_fn) and fn is None:
            self._curves[name_or_fn.__name__] = name_or_fn
            return name_or_fn
        self._curves[name_or_fn] = fn

    def get(self, name: str) -> EaseFn:
        if name not in self._curves:
            raise KeyError(f"No ease curve registered for {name!r}")
        return self._curves[name]

    def resolve(self, ease: str | EaseFn | None) -> EaseFn:
        """Return *ease* itself if callable, else look it up by name."""
        if ease is None:
            return linear
        if callable(ease):
            return ease
        return self.get(ease)

    def names(self) -> list[str]:
        return list(self._curves)


eases = EaseRegistry()


@eases.register
def linear(t: float) -> float:
    return t


@eases.register
def quad_in(t: float) -> float:
    return t * t


@eases.register
def quad_out(t: float) -> float:
    return t * (2 - t)


@eases.register
def quad_in_out(t: float) -> float:
    return 2 * t * t if t < 0.5 else -1 + (4 - 2 * t) * t


@eases.register
def cubic_in(t: float) -> float:
    return t ** 3


@eases.register
def cubic_out(t: float) -> float:
    return (t - 1) ** 3 + 1


@eases.register
def cubic_in_out(t: float) -> float:
    return 4 * t ** 3 if t < 0.5 else (t - 1) * (2 * t - 2) * (2 * t - 2) + 1


@eases.register
def sin_in_out(t: float) -> float:
    return (1 - math.cos(math.pi * t)) / 2
