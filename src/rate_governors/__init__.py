"""Public package exports for rate governors."""

from .config import GovernorConfig
from .core.async_timers import AsyncioTimerService
from .core.errors import RateGovernorError, TimerServiceClosedError, TimerServiceUnavailableError
from .core.timers import ThreadingTimerService, TimerService
from .governors import (
    ClockData,
    Clocked,
    ControllerData,
    Debounced,
    Throttled,
    clocked,
    debounce,
    throttle,
)

__all__ = [
    "throttle",
    "debounce",
    "clocked",
    "Throttled",
    "Debounced",
    "Clocked",
    "ClockData",
    "ControllerData",
    "GovernorConfig",
    "TimerService",
    "ThreadingTimerService",
    "AsyncioTimerService",
    "RateGovernorError",
    "TimerServiceClosedError",
    "TimerServiceUnavailableError",
]
