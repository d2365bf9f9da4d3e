"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from arctimer import ArcTimer, ManualScheduler, RecordingRenderer, build_options, build_segments


@dataclass
class CallbackRecorder:
    """Segment callback that records (data_name, value, progress, t) per tick."""

    calls: list[tuple[str, float, float, float]] = field(default_factory=list)

    def __call__(self, segment, timer, t: float) -> None:
        self.calls.append((segment.data_name, segment.value, timer.progress, t))


def value_segment(**overrides) -> dict:
    """Raw data for a segment animating value 0 -> 100 over a full turn."""
    data = {
        "start": {"angle": 0.0, "value": 0.0},
        "finish": {"angle": 1.0, "value": 100.0},
    }
    data.update(overrides)
    return data


def make_segment(raw: dict | None = None, **options):
    return build_segments([raw or {}], build_options(options))[0]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def timer(scheduler: ManualScheduler, renderer: RecordingRenderer) -> ArcTimer:
    """Single-segment timer, 1000ms duration, value 0 -> 100."""
    return ArcTimer(scheduler=scheduler, renderer=renderer).load_data(
        [value_segment(data_name="main")],
        {"duration": 1000, "name": "test-timer"},
    )


@pytest.fixture
def multi_timer(scheduler: ManualScheduler, renderer: RecordingRenderer) -> ArcTimer:
    """Three segments with different value ranges."""
    return ArcTimer(scheduler=scheduler, renderer=renderer).load_data(
        [
            {"data_name": "a", "finish": {"value": 10}},
            {"data_name": "b", "finish": {"value": 20}},
            {"data_name": "c", "finish": {"value": 30}},
        ],
        {"duration": 1000, "name": "multi"},
    )
