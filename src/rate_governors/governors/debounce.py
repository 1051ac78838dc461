"""Debounce governor."""

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


class Debounced(GovernorBase):
    """Forwards a call only once ``delay_ms`` of silence has passed.

    In leading mode the first call of a burst fires immediately and the
    rest of the burst is dropped.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        delay: object = None,
        leading: bool = False,
        context: object | None = None,
        *,
        clock: Clock | None = None,
        timer_service: TimerService | None = None,
        config: GovernorConfig | None = None,
    ) -> None:
        super().__init__(func, clock=clock, timer_service=timer_service, config=config)
        self._delay_ms = resolve_duration_ms(delay, self._config.debounce.delay_ms)
        self._leading = bool(leading)
        self._context = context
        self._active: Any = None
        self._reset: Any = None
        self._latest: Invocation | None = None

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def leading(self) -> bool:
        return self._leading

    def is_pending(self) -> bool:
        """True while a debounce window is open."""

        return self._active is not None

    def cancel(self) -> None:
        """Close the window and drop any pending trailing call."""

        with self._lock:
            self._release_timers_locked()

    def _invoke(
        self,
        call_site_context: object | None,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
    ) -> None:
        invocation = Invocation.capture(self._context, call_site_context, args, kwargs)
        with self._lock:
            self._latest = invocation

            if self._active is not None:
                self._release_timers_locked()
                if self._leading:
                    self._open_window_locked(invocation)
                else:
                    self._active = self._timers.schedule(
                        self._delay_ms, self._fire_trailing, invocation
                    )
                logger.debug("debounce restart func=%s", describe(self._func))
                return

            if not self._leading:
                self._active = self._timers.schedule(
                    self._delay_ms, self._fire_trailing, invocation
                )
                logger.debug("debounce open func=%s", describe(self._func))
                return

            # Open the window before firing so re-entrant calls are swallowed.
            self._open_window_locked(invocation)
            logger.debug("debounce fire func=%s leading=True", describe(self._func))
            invocation.replay(self._func)

    def _release_timers_locked(self) -> None:
        if self._reset is not None:
            self._timers.cancel(self._reset)
        # In leading mode the reset timer doubles as the active one.
        if self._active is not None and self._active is not self._reset:
            self._timers.cancel(self._active)
        self._reset = None
        self._active = None

    def _open_window_locked(self, invocation: Invocation) -> None:
        self._reset = self._timers.schedule(self._delay_ms, self._close_window, invocation)
        self._active = self._reset

    def _close_window(self, invocation: Invocation) -> None:
        with self._lock:
            if self._active is None or self._latest is not invocation:
                return
            self._active = None
            self._reset = None
            logger.debug("debounce close func=%s", describe(self._func))

    def _fire_trailing(self, invocation: Invocation) -> None:
        with self._lock:
            if self._active is None or self._latest is not invocation:
                return
            self._active = None
            logger.debug("debounce fire func=%s leading=False", describe(self._func))
            invocation.replay(self._func)


def debounce(
    func: Any = None,
    delay: object = None,
    leading: bool = False,
    context: object | None = None,
    *,
    clock: Clock | None = None,
    timer_service: TimerService | None = None,
    config: GovernorConfig | None = None,
) -> Any:
    """Return the debounced version of ``func`` (or a decorator without ``func``)."""

    return wrap_or_decorate(
        Debounced,
        func,
        delay=delay,
        leading=leading,
        context=context,
        clock=clock,
        timer_service=timer_service,
        config=config,
    )


__all__ = [
    "Debounced",
    "debounce",
]
