"""Multi-segment circular timer animation."""

from .config import ArcState, Immediate, LabelOptions, Options, build_options, merge
from .easing import EaseRegistry, eases
from .errors import (
    ArcTimerError,
    RunSuperseded,
    StyleError,
    TimerCancelled,
    TimerRejected,
    TransitionInterrupted,
)
from .handle import CompletionHandle, HandleState
from .interpolate import compute_tick, lerp, lerp_color, progress_at, ranged
from .render import ArcGeometry, RecordingRenderer, Renderer, arc_path
from .scheduler import (
    AsyncioScheduler,
    CancelToken,
    ManualScheduler,
    ScheduledTransition,
    Scheduler,
    ThreadScheduler,
)
from .segment import Segment, build_segments, parse_styles
from .timer import ArcTimer, RunState, RunStatus

__all__ = [
    "ArcGeometry",
    "arc_path",
    "ArcState",
    "ArcTimer",
    "ArcTimerError",
    "AsyncioScheduler",
    "build_options",
    "build_segments",
    "CancelToken",
    "CompletionHandle",
    "compute_tick",
    "EaseRegistry",
    "eases",
    "HandleState",
    "Immediate",
    "LabelOptions",
    "lerp",
    "lerp_color",
    "ManualScheduler",
    "merge",
    "Options",
    "parse_styles",
    "progress_at",
    "ranged",
    "RecordingRenderer",
    "Renderer",
    "RunState",
    "RunStatus",
    "RunSuperseded",
    "ScheduledTransition",
    "Scheduler",
    "Segment",
    "StyleError",
    "ThreadScheduler",
    "TimerCancelled",
    "TimerRejected",
    "TransitionInterrupted",
]

__version__ = "0.1.0"
