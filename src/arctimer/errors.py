"""Exception types raised or used for rejection by arctimer."""

from __future__ import annotations


class ArcTimerError(Exception):
    """Base class for arctimer errors."""


class StyleError(ArcTimerError, ValueError):
    """A label style declaration is not of the form ``name:value``."""


class TransitionInterrupted(ArcTimerError):
    """Internal signal: a scheduled transition stopped before its end."""

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or "transition interrupted")
        self.reason = reason


class TimerRejected(ArcTimerError):
    """A run's completion handle was rejected."""

    def __init__(self, timer, message: str = "timer rejected") -> None:
        super().__init__(message)
        self.timer = timer


class TimerCancelled(TimerRejected):
    def __init__(self, timer) -> None:
        super().__init__(timer, "timer cancelled")


class RunSuperseded(TimerRejected):
    """A pending run was replaced by a new one before it settled."""

    def __init__(self, timer) -> None:
        super().__init__(timer, "run superseded by a new run")
