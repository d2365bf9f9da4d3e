"""Frame schedulers that drive segment transitions.

A ``ScheduledTransition`` applies per-segment tweens on every tick with a
normalized, eased elapsed fraction. Schedulers own the clock and decide
when ticks happen:

- ``ManualScheduler``: the caller advances time explicitly.
- ``ThreadScheduler``: a daemon frame loop at a fixed fps.
- ``AsyncioScheduler``: frame callbacks on a running event loop.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Self

from .easing import EaseFn, eases, linear

if TYPE_CHECKING:
    from .render import Renderer
    from .segment import Segment

log = logging.getLogger(__name__)

TweenFactory = Callable[["Segment"], Callable[[float], Any]]

# Token reason for a transition whose final frame raised.
FRAME_ERROR = "frame error"


class CancelToken:
    """Cooperative interruption flag checked at the top of every tick."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class TransitionState(Enum):
    PENDING = "pending"
    ACTIVE = "active"
    ENDED = "ended"
    INTERRUPTED = "interrupted"


class ScheduledTransition:

    def __init__(
        self,
        scheduler: Scheduler,
        segments: list[Segment],
        name: str,
        renderer: Renderer,
        token: CancelToken | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.segments = sorted(segments, key=lambda s: s.index)
        self.name = name
        self.renderer = renderer
        self.token = token or CancelToken()
        self.state = TransitionState.PENDING
        self._ease: EaseFn = linear
        self._duration = 250.0
        self._attr_factories: list[tuple[str, TweenFactory]] = []
        self._style_factories: list[tuple[str, TweenFactory]] = []
        self._end_callbacks: list[Callable[[Segment, int], None]] = []
        self._interrupt_callbacks: list[Callable[[], None]] = []
        self._tweens: list[tuple[Segment, list[tuple[Callable, str, Callable]]]] = []
        self._started_at = 0.0

    def __repr__(self) -> str:
        return f"ScheduledTransition({self.name!r}, {self.state.value})"

    def ease(self, curve: str | EaseFn | None) -> Self:
        self._ease = eases.resolve(curve)
        return self

    def duration(self, ms: float) -> Self:
        self._duration = ms
        return self

    def tween_attribute(self, name: str, factory: TweenFactory) -> Self:
        self._attr_factories.append((name, factory))
        return self

    def tween_style(self, name: str, factory: TweenFactory) -> Self:
        self._style_factories.append((name, factory))
        return self

    def on_end(self, callback: Callable[[Segment, int], None]) -> Self:
        self._end_callbacks.append(callback)
        return self

    def on_interrupt(self, callback: Callable[[], None]) -> Self:
        self._interrupt_callbacks.append(callback)
        return self

    @property
    def done(self) -> bool:
        return self.state in (TransitionState.ENDED, TransitionState.INTERRUPTED)

    def start(self) -> Self:
        """Instantiate the tweens and hand the transition to the scheduler.

        A transition with no duration completes before this returns.
        """
        self.scheduler._supersede(self)
        self._started_at = self.scheduler.now()
        set_attr = self.renderer.set_attribute
        set_style = self.renderer.set_style
        self._tweens = [
            (
                segment,
                [(set_attr, name, factory(segment)) for name, factory in self._attr_factories]
                + [(set_style, name, factory(segment)) for name, factory in self._style_factories],
            )
            for segment in self.segments
        ]
        self.state = TransitionState.ACTIVE
        if self._duration <= 0:
            self.tick(self._started_at)
        else:
            self.scheduler._add(self)
        return self

    def fraction(self, now: float) -> float:
        if self._duration <= 0:
            return 1.0
        return min(1.0, max(0.0, (now - self._started_at) / self._duration))

    def tick(self, now: float) -> bool:
        """Apply one frame at *now*. Returns ``True`` while still running."""
        if self.done:
            return False
        if self.token.cancelled:
            self.interrupt()
            return False

        t = self.fraction(now)
        eased = self._ease(t)
        for segment, tweens in self._tweens:
            for apply, name, tween in tweens:
                apply(segment, name, tween(eased))

        if t < 1.0:
            return True
        if self.token.cancelled:
            self.interrupt()
            return False
        self.state = TransitionState.ENDED
        for segment in self.segments:
            for callback in self._end_callbacks:
                callback(segment, segment.index)
        return False

    def interrupt(self) -> None:
        self.token.cancel()
        if self.done:
            return
        self.state = TransitionState.INTERRUPTED
        for callback in self._interrupt_callbacks:
            callback()


class Scheduler:
    """Base scheduler: keeps the active transitions and ticks them on ``pump``.

    Subclasses provide the clock (``now``, in milliseconds) and arrange for
    ``pump`` to be called once per frame.
    """

    # Frame loops log tick errors and carry on; manual driving raises them.
    log_errors = False

    def __init__(self) -> None:
        self._active: list[ScheduledTransition] = []

    def now(self) -> float:
        raise NotImplementedError

    def transition(
        self,
        segments: list[Segment],
        name: str,
        renderer: Renderer,
        token: CancelToken | None = None,
    ) -> ScheduledTransition:
        return ScheduledTransition(self, segments, name, renderer, token)

    @property
    def active(self) -> list[ScheduledTransition]:
        return list(self._active)

    def _supersede(self, transition: ScheduledTransition) -> None:
        for other in list(self._active):
            if other is not transition and other.name == transition.name:
                other.token.cancel("superseded")

    def _add(self, transition: ScheduledTransition) -> None:
        self._active.append(transition)
        self._wake()

    def _discard(self, transition: ScheduledTransition) -> None:
        if transition in self._active:
            self._active.remove(transition)

    def _wake(self) -> None:
        pass

    def pump(self, now: float | None = None) -> None:
        """Tick every active transition once."""
        now = self.now() if now is None else now
        for transition in list(self._active):
            try:
                running = transition.tick(now)
            except Exception:
                if not self.log_errors:
                    raise
                log.exception("Error ticking transition %r at %.1fms", transition.name, now)
                running = transition.fraction(now) < 1.0
                if not running:
                    transition.token.cancel(FRAME_ERROR)
                    transition.interrupt()
            if not running:
                self._discard(transition)


class ManualScheduler(Scheduler):
    """Scheduler whose clock only moves when ``advance`` is called."""

    def __init__(self, start: float = 0.0) -> None:
        super().__init__()
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, ms: float) -> None:
        self._now += ms
        self.pump()

    def run_until_idle(self, step: float = 25.0, max_frames: int = 100_000) -> int:
        """Advance in *step* increments until no transition is active."""
        frames = 0
        while self._active:
            if frames >= max_frames:
                raise RuntimeError(f"transitions still active after {max_frames} frames")
            self.advance(step)
            frames += 1
        return frames


class ThreadScheduler(Scheduler):
    """Frame loop on a daemon thread, started on demand.

    The loop exits once no transitions remain and restarts when a new one
    is added.
    """

    log_errors = True

    def __init__(self, fps: float = 40.0) -> None:
        super().__init__()
        self.fps = fps
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

    def now(self) -> float:
        return time.monotonic() * 1000.0

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def _wake(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._loop,
                name="arctimer-frames",
                daemon=True,
            )
            self._thread.start()

    def _loop(self) -> None:
        frame_duration = 1.0 / self.fps
        next_target = time.monotonic()
        while not self._stop_event.is_set():
            self.pump()
            with self._lock:
                if not self._active:
                    self._thread = None
                    return
            next_target += frame_duration
            delay = max(0.0, next_target - time.monotonic())
            if self._stop_event.wait(timeout=delay):
                break

    def wait(self, timeout: float | None = None) -> None:
        """Block until the frame loop has nothing left to run."""
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def stop(self) -> None:
        """Stop the frame loop and interrupt whatever is still active."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        with self._lock:
            self._thread = None
        for transition in list(self._active):
            transition.interrupt()
            self._discard(transition)


class AsyncioScheduler(Scheduler):
    """Frame callbacks on an asyncio event loop.

    Transitions must be started while the loop is running (or pass *loop*).
    """

    log_errors = True

    def __init__(self, fps: float = 40.0, loop: asyncio.AbstractEventLoop | None = None) -> None:
        super().__init__()
        self.fps = fps
        self._loop = loop
        self._frame_handle: asyncio.Handle | None = None

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self._get_loop().time() * 1000.0

    def _wake(self) -> None:
        if self._frame_handle is None:
            self._frame_handle = self._get_loop().call_soon(self._frame)

    def _frame(self) -> None:
        self._frame_handle = None
        self.pump()
        if self._active and self._frame_handle is None:
            self._frame_handle = self._get_loop().call_later(1.0 / self.fps, self._frame)

    def stop(self) -> None:
        if self._frame_handle is not None:
            self._frame_handle.cancel()
            self._frame_handle = None
        for transition in list(self._active):
            transition.interrupt()
            self._discard(transition)
