"""Duration sanitization."""

from __future__ import annotations

import math
import re

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def _to_int(value: object) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if match is None:
            return 0
        return int(match.group(1))
    return 0


def sanitize_non_negative_ms(value: object) -> int:
    """Coerce ``value`` to a non-negative integer millisecond count.

    Anything that is not a finite number (or a string starting with an
    integer) reads as 0.
    """

    return max(_to_int(value), 0)


def resolve_duration_ms(value: object, default_ms: int) -> int:
    """Sanitize ``value`` and fall back to ``default_ms`` when it reads as 0."""

    return sanitize_non_negative_ms(value) or default_ms


__all__ = [
    "sanitize_non_negative_ms",
    "resolve_duration_ms",
]
