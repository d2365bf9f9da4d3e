"""Run controller for multi-segment arc timers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any, Self

from .config import Options, build_options
from .easing import eases, linear
from .errors import RunSuperseded, TimerCancelled, TimerRejected, TransitionInterrupted
from .handle import CompletionHandle
from .interpolate import fill_interpolator, interpolators, progress_at
from .render import RecordingRenderer, Renderer
from .scheduler import FRAME_ERROR, CancelToken, Scheduler, ThreadScheduler
from .segment import Segment, build_segments, parse_classes, parse_styles

log = logging.getLogger(__name__)

# Loaded when no data is given: two segments with the default options.
DEFAULT_DATA: tuple[dict, ...] = ({}, {})


class RunStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"
    CANCELLED = "cancelled"


@dataclass
class RunState:
    """State of one run. Replaced wholesale whenever a new run begins."""

    handle: CompletionHandle = field(default_factory=CompletionHandle)
    duration: float = 0.0
    start_at: float = 0.0
    finish_at: float = 1.0
    progress: float = 0.0
    paused: bool = False
    finished: bool = True
    cancelled: bool = False
    begun: bool = False

    @property
    def status(self) -> RunStatus:
        if self.cancelled:
            return RunStatus.CANCELLED
        if self.paused:
            return RunStatus.PAUSED
        if not self.begun:
            return RunStatus.IDLE
        if self.finished:
            return RunStatus.FINISHED
        return RunStatus.RUNNING


class ArcTimer:
    """Circular timer made of independently configured arc segments.

    Each run animates every segment from its ``start`` state to its
    ``finish`` state and settles a single ``CompletionHandle``: resolved when
    the last segment finishes (or on ``resolve()``), rejected on ``cancel()``
    or ``reject()``. ``pause()`` stops the motion without settling the
    handle, and ``resume()`` continues from the exact paused progress.

    Control calls made in a state where they do not apply are ignored.
    """

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        self.scheduler = scheduler if scheduler is not None else ThreadScheduler()
        self._renderer = renderer if renderer is not None else RecordingRenderer()
        self._options: Options | None = None
        self._segments: list[Segment] = []
        self._state: RunState | None = None
        self._token: CancelToken | None = None
        # Guards progress writes from frame threads against run changes.
        self._progress_lock = threading.Lock()

    def __repr__(self) -> str:
        name = self._options.name if self._options else None
        return f"ArcTimer({name!r}, {self.status.value}, progress={self.progress:.3f})"

    # --- setup ---

    def init(self, options: Mapping[str, Any] | Options | None = None) -> Self:
        self._options = build_options(options)
        return self

    def load_data(
        self,
        data: Sequence[Mapping[str, Any]] | None = None,
        options: Mapping[str, Any] | Options | None = None,
    ) -> Self:
        """(Re)build the segments, applying *options* if given.

        Raises ``StyleError`` for malformed label styles before anything
        changes. Any pending run is superseded.
        """
        if self._options is None or options is not None:
            opts = build_options(options)
        else:
            opts = self._options
        segments = build_segments(DEFAULT_DATA if data is None else data, opts)
        styles = parse_styles(opts.values.styles)
        classes = parse_classes(opts.values.classes)

        self._options = opts
        self._replace_state(RunState())
        self._segments = segments
        self._renderer.setup(opts, segments, styles, classes)
        for segment in segments:
            self._renderer.set_attribute(segment, "d", self._renderer.draw_arc(segment.geometry()))
            self._renderer.set_style(segment, "fill", segment.fill)
        log.debug("Loaded %d segments into %s", len(segments), opts.name)
        return self

    # --- run control ---

    def start(
        self,
        duration: float | None = None,
        start_at: float = 0.0,
        finish_at: float = 1.0,
    ) -> CompletionHandle:
        """Begin a new run and return its completion handle.

        *duration* is in milliseconds and defaults to the configured one.
        *start_at*/*finish_at* bound the part of the timeline to play.
        """
        if self._state is None:
            self.load_data()
        duration = self._options.duration if duration is None else duration
        self._replace_state(RunState(duration=duration))
        log.debug(
            "Starting %s: duration=%sms start_at=%s finish_at=%s",
            self._options.name, duration, start_at, finish_at,
        )
        return self._work(start_at, duration, finish_at)

    def pause(self) -> Self:
        if self.is_running:
            with self._progress_lock:
                self._state.paused = True
                self._interrupt("paused")
            log.debug("Paused %s at progress %.4f", self._options.name, self._state.progress)
        return self

    def resume(self) -> CompletionHandle | None:
        """Continue a paused run from where it stopped.

        The remaining duration is the original duration scaled by the part
        of the timeline still to play.
        """
        if not self.is_paused:
            return None
        state = self._state
        if eases.resolve(self._options.ease) is not linear:
            log.warning("Resuming %s with a non-linear ease; motion may jump", self._options.name)
        progress = state.progress
        log.debug("Resuming %s from progress %.4f", self._options.name, progress)
        return self._work(progress, state.duration * (state.finish_at - progress), state.finish_at)

    def cancel(self) -> None:
        state = self._state
        if state is None or state.handle.done():
            return
        state.cancelled = True
        log.debug("Cancelled %s at progress %.4f", self._options.name, state.progress)
        self._settle(lambda handle: handle.reject(TimerCancelled(self)))

    def resolve(self) -> Self:
        self._settle(lambda handle: handle.resolve(self))
        return self

    def reject(self) -> Self:
        self._settle(lambda handle: handle.reject(TimerRejected(self)))
        return self

    def set_progress(self, progress: float, duration: float = 0) -> CompletionHandle:
        """Move every segment to *progress*, animated over *duration* ms.

        Continues the pending run's handle if there is one, else begins a
        new run. With no duration the handle settles before this returns.
        """
        if self._state is None:
            self.load_data()
        state = self._state
        if state.handle.done():
            self._replace_state(RunState(duration=duration))
        else:
            state.duration = duration
        return self._work(0.0, duration, progress)

    # --- queries ---

    @property
    def data(self) -> list[Segment]:
        return self._segments

    def get_item(self, data_name: str) -> Segment | None:
        found = None
        for segment in self._segments:
            if segment.data_name == data_name:
                found = segment
        return found

    @property
    def control(self) -> Options | None:
        return self._options

    @property
    def run(self) -> RunState | None:
        return self._state

    @property
    def renderer(self) -> Renderer:
        return self._renderer

    @property
    def handle(self) -> CompletionHandle | None:
        return self._state.handle if self._state else None

    @property
    def is_paused(self) -> bool:
        return self._state is not None and self._state.paused

    @property
    def is_finished(self) -> bool:
        return self._state is None or self._state.finished

    @property
    def is_running(self) -> bool:
        return not self.is_finished and not self.is_paused

    @property
    def is_cancelled(self) -> bool:
        return self._state is not None and self._state.cancelled

    @property
    def progress(self) -> float:
        return self._state.progress if self._state else 0.0

    @property
    def status(self) -> RunStatus:
        return self._state.status if self._state else RunStatus.IDLE

    # --- internals ---

    def _interrupt(self, reason: str | None = None) -> None:
        if self._token is not None:
            self._token.cancel(reason)

    def _replace_state(self, state: RunState) -> None:
        old = self._state
        self._interrupt("superseded")
        self._state = state
        if old is not None and not old.handle.done():
            log.debug("Superseding pending run of %s", self._options.name)
            old.handle.reject(RunSuperseded(self))

    def _settle(self, settle) -> None:
        state = self._state
        if state is None:
            return
        state.paused = False
        state.finished = True
        self._interrupt("settled")
        settle(state.handle)

    def _work(self, start_at: float, duration: float, finish_at: float) -> CompletionHandle:
        state = self._state
        with self._progress_lock:
            self._interrupt("superseded")
            state.start_at = start_at
            state.finish_at = finish_at
            state.progress = start_at
        state.paused = state.finished = state.cancelled = False
        state.begun = True

        if not self._segments:
            self.resolve()
            return state.handle

        token = self._token = CancelToken()
        signal = CompletionHandle(label=f"{self._options.name} transition")
        signal.add_done_callback(partial(self._transition_settled, state))
        last = max(segment.index for segment in self._segments)

        (
            self.scheduler.transition(self._segments, self._options.name, self._renderer, token)
            .ease(self._options.ease)
            .duration(duration)
            .tween_attribute("d", partial(self._arc_tween, state))
            .tween_style("fill", partial(self._fill_tween, state))
            .on_end(partial(self._segment_ended, state, signal, last))
            .on_interrupt(lambda: signal.reject(TransitionInterrupted(token.reason)))
            .start()
        )
        return state.handle

    def _arc_tween(self, state: RunState, segment: Segment):
        start_at, finish_at = state.start_at, state.finish_at
        token = self._token
        attributes = interpolators(segment, start_at)

        def tween(t: float) -> Any:
            x = t * finish_at
            for name, fn in attributes.items():
                setattr(segment, name, fn(x))
            with self._progress_lock:
                if not token.cancelled:
                    state.progress = progress_at(start_at, finish_at, t)
            if segment.callback is not None:
                segment.callback(segment, self, t)
            if segment.values.show:
                self._renderer.set_text(segment.values.decorate(segment.value))
            return self._renderer.draw_arc(segment.geometry())

        return tween

    def _fill_tween(self, state: RunState, segment: Segment):
        finish_at = state.finish_at
        fill = fill_interpolator(segment, state.start_at)

        def tween(t: float) -> str:
            segment.fill = fill(t * finish_at)
            return segment.fill

        return tween

    def _segment_ended(
        self,
        state: RunState,
        signal: CompletionHandle,
        last: int,
        segment: Segment,
        index: int,
    ) -> None:
        if index == last:
            state.finished = True
            signal.resolve(self)

    def _transition_settled(self, state: RunState, signal: CompletionHandle) -> None:
        if signal.rejected:
            error = signal.exception()
            if getattr(error, "reason", None) == FRAME_ERROR and state is self._state:
                self._settle(lambda handle: handle.reject(TimerRejected(self, "final frame failed")))
                return
            # Pauses, cancels and superseding runs end transitions this way.
            log.debug("Transition interrupted: %s", error)
            return
        if state is self._state:
            self.resolve()
