"""Single-settlement completion handle for timer runs."""

from __future__ import annotations

import asyncio
import logging
import threading
from enum import Enum
from typing import Any, Callable

log = logging.getLogger(__name__)


class HandleState(Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class CompletionHandle:
    """A future that settles exactly once.

    ``resolve`` and ``reject`` are no-ops returning ``False`` once the
    handle has settled. Done callbacks receive the handle and run in the
    thread that settles it (or immediately, if already settled).

    The handle can be waited on from a thread (``wait``/``result``) or
    awaited from a running asyncio loop.
    """

    def __init__(self, label: str | None = None) -> None:
        self.label = label
        self._state = HandleState.PENDING
        self._value: Any = None
        self._error: BaseException | None = None
        self._callbacks: list[Callable[[CompletionHandle], None]] = []
        self._lock = threading.Lock()
        self._done_event = threading.Event()

    def __repr__(self) -> str:
        return f"CompletionHandle({self.label!r}, {self._state.value})"

    @property
    def state(self) -> HandleState:
        return self._state

    def done(self) -> bool:
        return self._state is not HandleState.PENDING

    @property
    def resolved(self) -> bool:
        return self._state is HandleState.RESOLVED

    @property
    def rejected(self) -> bool:
        return self._state is HandleState.REJECTED

    def resolve(self, value: Any = None) -> bool:
        return self._settle(HandleState.RESOLVED, value, None)

    def reject(self, error: BaseException) -> bool:
        return self._settle(HandleState.REJECTED, None, error)

    def _settle(self, state: HandleState, value: Any, error: BaseException | None) -> bool:
        with self._lock:
            if self._state is not HandleState.PENDING:
                return False
            self._state = state
            self._value = value
            self._error = error
            callbacks, self._callbacks = self._callbacks, []
        self._done_event.set()
        for fn in callbacks:
            self._run_callback(fn)
        return True

    def _run_callback(self, fn: Callable[[CompletionHandle], None]) -> None:
        try:
            fn(self)
        except Exception:
            log.exception("Error in done callback of %r", self)

    def add_done_callback(self, fn: Callable[[CompletionHandle], None]) -> None:
        with self._lock:
            if self._state is HandleState.PENDING:
                self._callbacks.append(fn)
                return
        self._run_callback(fn)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until settled. Returns ``False`` on timeout."""
        return self._done_event.wait(timeout)

    def exception(self) -> BaseException | None:
        return self._error

    def result(self, timeout: float | None = None) -> Any:
        """Return the resolved value, or raise the rejection error."""
        if not self.wait(timeout):
            raise TimeoutError(f"{self!r} did not settle within {timeout}s")
        if self._error is not None:
            raise self._error
        return self._value

    def __await__(self):
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def transfer(handle: CompletionHandle) -> None:
            loop.call_soon_threadsafe(_copy_outcome, handle, future)

        self.add_done_callback(transfer)
        return future.__await__()


def _copy_outcome(handle: CompletionHandle, future: asyncio.Future) -> None:
    if future.done():
        return
    if handle.rejected:
        future.set_exception(handle.exception())
    else:
        future.set_result(handle._value)
