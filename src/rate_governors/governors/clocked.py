"""Clocked governor: repeat a call on a fixed interval until terminated."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..config import GovernorConfig
from ..core.clock import Clock
from ..core.durations import resolve_duration_ms
from ..core.invocation import Invocation, forward
from ..core.timers import TimerService
from .shared import GovernorBase, describe, wrap_or_decorate

logger = logging.getLogger("rate_governors")


@dataclass(slots=True, frozen=True)
class ClockData:
    """Timing of one tick."""

    interval: int
    start_time: int
    timestamp: int
    count: int

    @property
    def elapsed_ms(self) -> int:
        return self.timestamp - self.start_time


@dataclass(slots=True, frozen=True)
class ControllerData:
    """Snapshot handed to a controller on every tick.

    ``proceed(context, *args, **kwargs)`` runs the original callable and
    ``terminate()`` stops the governor; the controller may call either,
    both or neither.
    """

    clock: ClockData
    target: object | None
    args: tuple[Any, ...]
    kwargs: Mapping[str, Any]
    proceed: Callable[..., Any] = field(repr=False)
    terminate: Callable[[], None] = field(repr=False)

    def proceed_captured(self) -> Any:
        """Run the original callable with the captured target and arguments."""

        return self.proceed(self.target, *self.args, **self.kwargs)


Controller = Callable[[ControllerData], Any]


class Clocked(GovernorBase):
    """Calls the wrapped callable every ``interval_ms`` once started.

    Calling the governor (re)starts the cycle with the call's arguments; a
    running cycle is terminated first, so timers never stack. The cycle runs
    until :meth:`terminate` is called, either by the owner or by a
    controller.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        interval: object = None,
        target: object | None = None,
        controller: Controller | None = None,
        *,
        clock: Clock | None = None,
        timer_service: TimerService | None = None,
        config: GovernorConfig | None = None,
    ) -> None:
        super().__init__(func, clock=clock, timer_service=timer_service, config=config)
        self._interval_ms = resolve_duration_ms(interval, self._config.clocked.interval_ms)
        self._target = target
        self._controller = controller if callable(controller) else None
        self._handle: Any = None
        self._count: int | None = None
        self._start_time: int | None = None
        self._captured: Invocation | None = None
        self._cycle = 0

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def count(self) -> int | None:
        return self._count

    @property
    def start_time(self) -> int | None:
        return self._start_time

    def is_active(self) -> bool:
        return self._handle is not None

    def start(self, *args: Any, **kwargs: Any) -> None:
        self._invoke(None, args, kwargs)

    def terminate(self) -> None:
        """Stop the cycle. Safe to call when inactive."""

        with self._lock:
            self._terminate_locked()

    def proceed(self, context: object | None, /, *args: Any, **kwargs: Any) -> Any:
        """Run the original callable once with an explicit context."""

        with self._lock:
            return forward(self._func, context, args, kwargs)

    def _terminate_locked(self) -> None:
        if self._handle is None:
            return
        self._timers.cancel(self._handle)
        self._handle = None
        self._start_time = None
        self._count = None
        logger.debug("clocked terminate func=%s", describe(self._func))

    def _invoke(
        self,
        call_site_context: object | None,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
    ) -> None:
        invocation = Invocation.capture(self._target, call_site_context, args, kwargs)
        with self._lock:
            if self._handle is not None:
                self._terminate_locked()
            self._captured = invocation
            self._count = 0
            self._start_time = self._clock()
            self._cycle += 1
            self._handle = self._timers.schedule(self._interval_ms, self._tick, self._cycle)
            logger.debug(
                "clocked start func=%s interval_ms=%s cycle=%s",
                describe(self._func),
                self._interval_ms,
                self._cycle,
            )

    def _tick(self, cycle: int) -> None:
        with self._lock:
            if cycle != self._cycle or self._handle is None:
                return
            self._count += 1
            now = self._clock()
            # Next slot on the start_time + n * interval grid: never one already
            # ticked (clock may read behind the timer), skipping slots a late tick missed.
            slot = max(self._count, (now - self._start_time) // self._interval_ms) + 1
            delay_ms = max(self._start_time + slot * self._interval_ms - now, 0)
            self._handle = self._timers.schedule(delay_ms, self._tick, cycle)
            logger.debug("clocked tick func=%s count=%s", describe(self._func), self._count)

            if self._controller is None:
                self._captured.replay(self._func)
                return
            self._controller(
                ControllerData(
                    clock=ClockData(
                        interval=self._interval_ms,
                        start_time=self._start_time,
                        timestamp=now,
                        count=self._count,
                    ),
                    target=self._captured.context,
                    args=tuple(self._captured.args),
                    kwargs=dict(self._captured.kwargs),
                    proceed=self.proceed,
                    terminate=self.terminate,
                )
            )


def clocked(
    func: Any = None,
    interval: object = None,
    target: object | None = None,
    controller: Controller | None = None,
    *,
    clock: Clock | None = None,
    timer_service: TimerService | None = None,
    config: GovernorConfig | None = None,
) -> Any:
    """Return the clocked version of ``func`` (or a decorator without ``func``).

    The returned governor also exposes ``terminate()`` and ``is_active()``.
    """

    return wrap_or_decorate(
        Clocked,
        func,
        interval=interval,
        target=target,
        controller=controller,
        clock=clock,
        timer_service=timer_service,
        config=config,
    )


__all__ = [
    "ClockData",
    "ControllerData",
    "Controller",
    "Clocked",
    "clocked",
]
