"""Error types."""

from __future__ import annotations


class RateGovernorError(Exception):
    """Base exception for this package."""

    def __init__(self, message: str, *, cause: str | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class TimerServiceClosedError(RateGovernorError):
    """Raised when a timer service is used after close."""


class TimerServiceUnavailableError(RateGovernorError):
    """Raised when a timer service has no event loop to schedule on."""


__all__ = [
    "RateGovernorError",
    "TimerServiceClosedError",
    "TimerServiceUnavailableError",
]
