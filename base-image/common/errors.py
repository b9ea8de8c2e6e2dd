"""Failure taxonomy for a wake invocation. Every error here is fatal for the invocation."""

from __future__ import annotations

from typing import Optional


class WakeProxyError(Exception):
    """Base class for errors that terminate a wake invocation."""


class UpstreamQueryError(WakeProxyError):
    """A read or write against the scheduler control plane failed."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


class ReadinessTimeout(WakeProxyError):
    """No running task was observed before the polling budget ran out."""

    def __init__(self, budget_s: float, rounds: int) -> None:
        super().__init__(f"no running task observed after {rounds} poll rounds within {budget_s:.1f}s")
        self.budget_s = budget_s
        self.rounds = rounds


class ForwardError(WakeProxyError):
    """The woken service could not be reached or spoke broken HTTP."""

    def __init__(self, url: str, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"forward to {url} failed: {message}")
        self.url = url
        self.cause = cause
