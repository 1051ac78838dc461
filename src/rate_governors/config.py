"""Governor configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_THROTTLE_THRESHOLD_MS = 200
DEFAULT_DEBOUNCE_DELAY_MS = 100
DEFAULT_CLOCKED_INTERVAL_MS = 200


def _validate_duration(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be int")
    if value <= 0:
        raise ValueError(f"{name} must be > 0")


@dataclass(slots=True, frozen=True)
class ThrottleConfig:
    """Throttle-related settings."""

    threshold_ms: int = DEFAULT_THROTTLE_THRESHOLD_MS

    def validate(self) -> None:
        _validate_duration("throttle.threshold_ms", self.threshold_ms)


@dataclass(slots=True, frozen=True)
class DebounceConfig:
    """Debounce-related settings."""

    delay_ms: int = DEFAULT_DEBOUNCE_DELAY_MS

    def validate(self) -> None:
        _validate_duration("debounce.delay_ms", self.delay_ms)


@dataclass(slots=True, frozen=True)
class ClockedConfig:
    """Clocked-related settings."""

    interval_ms: int = DEFAULT_CLOCKED_INTERVAL_MS

    def validate(self) -> None:
        _validate_duration("clocked.interval_ms", self.interval_ms)


@dataclass(slots=True, frozen=True)
class GovernorConfig:
    """Default durations used when a governor gets none (or an invalid one)."""

    throttle: ThrottleConfig = field(default_factory=ThrottleConfig)
    debounce: DebounceConfig = field(default_factory=DebounceConfig)
    clocked: ClockedConfig = field(default_factory=ClockedConfig)

    def validate(self) -> None:
        self.throttle.validate()
        self.debounce.validate()
        self.clocked.validate()


__all__ = [
    "DEFAULT_THROTTLE_THRESHOLD_MS",
    "DEFAULT_DEBOUNCE_DELAY_MS",
    "DEFAULT_CLOCKED_INTERVAL_MS",
    "ThrottleConfig",
    "DebounceConfig",
    "ClockedConfig",
    "GovernorConfig",
]
