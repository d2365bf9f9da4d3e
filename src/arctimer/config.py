"""Layered option merging and typed timer options."""

from __future__ import annotations

import dataclasses
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

log = logging.getLogger(__name__)


@dataclass
class ArcState:
    """Visual and value state of a segment at one end of its transition.

    ``angle`` is a fraction of a full turn. Radii are derived from the
    ratios and the container height when segments are built.
    """

    angle: float = 0.0
    inner_ratio: float = 0.8
    outer_ratio: float = 0.95
    fill: str = "#2196F3"
    value: float = 0.0
    inner_radius: float | None = None
    outer_radius: float | None = None


@dataclass
class Immediate:
    angle: bool = False


@dataclass
class LabelOptions:
    show: bool = False
    classes: str = ""
    styles: str = "text-anchor:middle;"
    decorate: Callable[[float], Any] = round


def _default_name() -> str:
    return f"ArcTimer-{uuid.uuid4().hex[:8]}"


@dataclass
class Options:
    height: float = 100.0
    width: float = 100.0
    ease: str | Callable[[float], float] = "linear"
    duration: float = 5000.0
    callback: Callable | None = None
    name: str = field(default_factory=_default_name)
    start: ArcState = field(default_factory=ArcState)
    finish: ArcState = field(
        default_factory=lambda: ArcState(angle=1.0, fill="#FFC107", value=100.0)
    )
    immediate: Immediate = field(default_factory=Immediate)
    values: LabelOptions = field(default_factory=LabelOptions)
    custom: dict = field(default_factory=dict)


# Nested option sections and the dataclass each one is built into.
_SECTIONS: dict[str, type] = {
    "start": ArcState,
    "finish": ArcState,
    "immediate": Immediate,
    "values": LabelOptions,
}

_OPTION_TYPES = (Options, ArcState, Immediate, LabelOptions)


def _as_mapping(obj: Any) -> Any:
    # Only option sections merge key by key; other dataclasses are leaves.
    if isinstance(obj, _OPTION_TYPES):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    return obj


def _extend(result: dict, layer: Mapping) -> dict:
    for key, value in layer.items():
        value = _as_mapping(value)
        if isinstance(value, Mapping):
            base = _as_mapping(result.get(key))
            result[key] = _extend(dict(base) if isinstance(base, Mapping) else {}, value)
        else:
            result[key] = value
    return result


def merge(*layers: Mapping | Options | None) -> dict:
    """Deep-merge option layers, later layers taking precedence.

    Mappings (and option dataclasses) merge key by key; every other value,
    lists included, replaces what came before. Inputs are not modified.

    >>> merge({"start": {"angle": 0, "value": 0}}, {"start": {"value": 5}})
    {'start': {'angle': 0, 'value': 5}}
    """
    result: dict = {}
    for layer in layers:
        if layer is None:
            continue
        _extend(result, _as_mapping(layer))
    return result


def _build(cls: type, values: Mapping, path: str) -> Any:
    known = {f.name for f in dataclasses.fields(cls)}
    kwargs = {}
    for key, value in values.items():
        if key not in known:
            log.warning("Ignoring unknown option %r", f"{path}{key}")
            continue
        section = _SECTIONS.get(key) if cls is Options else None
        if section is not None and isinstance(value, Mapping):
            value = _build(section, value, f"{key}.")
        elif key == "custom" and isinstance(value, Mapping):
            value = dict(value)
        kwargs[key] = value
    return cls(**kwargs)


def build_options(*layers: Mapping | Options | None) -> Options:
    """Build typed ``Options`` from the defaults plus any override layers."""
    return _build(Options, merge(Options(), *layers), "")
