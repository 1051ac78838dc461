"""Throttle governor."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..config import GovernorConfig
from ..core.clock import Clock
from ..core.durations import resolve_duration_ms
from ..core.invocation import Invocation
from ..core.timers import TimerService
from .shared import GovernorBase, describe, wrap_or_decorate

logger = logging.getLogger("rate_governors")


class Throttled(GovernorBase):
    """Forwards at most one call per ``threshold_ms``.

    The first call fires immediately. Later calls inside the threshold are
    coalesced into a single trailing call carrying the most recent
    arguments. With ``suppress_trailing`` a call arriving after the threshold
    has elapsed fires immediately instead of being deferred.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        threshold: object = None,
        suppress_trailing: bool = False,
        context: object | None = None,
        *,
        clock: Clock | None = None,
        timer_service: TimerService | None = None,
        config: GovernorConfig | None = None,
    ) -> None:
        super().__init__(func, clock=clock, timer_service=timer_service, config=config)
        self._threshold_ms = resolve_duration_ms(threshold, self._config.throttle.threshold_ms)
        self._suppress_trailing = bool(suppress_trailing)
        self._context = context
        self._pending: Any = None
        self._last_fire_at: int | None = None
        self._latest: Invocation | None = None

    @property
    def threshold_ms(self) -> int:
        return self._threshold_ms

    @property
    def suppress_trailing(self) -> bool:
        return self._suppress_trailing

    @property
    def last_fire_at(self) -> int | None:
        return self._last_fire_at

    def is_pending(self) -> bool:
        return self._pending is not None

    def cancel(self) -> None:
        """Drop the pending trailing call, if any."""

        with self._lock:
            self._cancel_pending_locked()

    def reset(self) -> None:
        """Cancel and forget the last fire so the next call leads again."""

        with self._lock:
            self._cancel_pending_locked()
            self._last_fire_at = None

    def _cancel_pending_locked(self) -> None:
        if self._pending is None:
            return
        self._timers.cancel(self._pending)
        self._pending = None
        logger.debug("throttle cancel func=%s", describe(self._func))

    def _invoke(
        self,
        call_site_context: object | None,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
    ) -> None:
        invocation = Invocation.capture(self._context, call_site_context, args, kwargs)
        with self._lock:
            self._latest = invocation
            self._cancel_pending_locked()

            now = self._clock()
            if self._last_fire_at is None:
                self._fire_locked(invocation, now)
                return

            gap = now - self._last_fire_at
            if self._suppress_trailing and gap >= self._threshold_ms:
                self._fire_locked(invocation, now)
                return

            delay_ms = max(self._threshold_ms - gap, 0)
            self._pending = self._timers.schedule(delay_ms, self._fire_trailing, invocation)
            logger.debug(
                "throttle schedule func=%s delay_ms=%s",
                describe(self._func),
                delay_ms,
            )

    def _fire_trailing(self, invocation: Invocation) -> None:
        with self._lock:
            # A thread timer can outlive its cancel(); only the latest call may fire.
            if self._pending is None or self._latest is not invocation:
                return
            self._pending = None
            self._fire_locked(invocation, self._clock())

    def _fire_locked(self, invocation: Invocation, now: int) -> None:
        self._last_fire_at = now
        logger.debug("throttle fire func=%s at=%s", describe(self._func), now)
        invocation.replay(self._func)


def throttle(
    func: Any = None,
    threshold: object = None,
    suppress_trailing: bool = False,
    context: object | None = None,
    *,
    clock: Clock | None = None,
    timer_service: TimerService | None = None,
    config: GovernorConfig | None = None,
) -> Any:
    """Return the throttled version of ``func``.

    Without ``func`` this returns a decorator, so both ``throttle(f, 100)``
    and ``@throttle(threshold=100)`` work. A non-callable ``func`` is
    returned unchanged.
    """

    return wrap_or_decorate(
        Throttled,
        func,
        threshold=threshold,
        suppress_trailing=suppress_trailing,
        context=context,
        clock=clock,
        timer_service=timer_service,
        config=config,
    )


__all__ = [
    "Throttled",
    "throttle",
]
