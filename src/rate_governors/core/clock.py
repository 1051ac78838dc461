"""Monotonic millisecond clock."""

from __future__ import annotations

import time
from collections.abc import Callable

Clock = Callable[[], int]


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


__all__ = [
    "Clock",
    "monotonic_ms",
]
