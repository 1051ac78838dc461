"""Plumbing shared by the throttle, debounce and clocked governors."""

from __future__ import annotations

import functools
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from ..config import GovernorConfig
from ..core.clock import Clock, monotonic_ms
from ..core.timers import TimerService, default_timer_service

logger = logging.getLogger("rate_governors")


def describe(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


class GovernorBase(ABC):
    """Base for objects that govern when a wrapped callable runs.

    Calling a governor never returns the wrapped callable's result. The
    governor decides whether the call is forwarded now, later or not at all.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        *,
        clock: Clock | None = None,
        timer_service: TimerService | None = None,
        config: GovernorConfig | None = None,
    ) -> None:
        if not callable(func):
            raise TypeError(f"{type(self).__name__} requires a callable")
        self._config = config or GovernorConfig()
        self._config.validate()
        self._func = func
        self._clock = clock or monotonic_ms
        self._timers = timer_service or default_timer_service()
        self._lock = threading.RLock()
        functools.update_wrapper(self, func, updated=())

    @property
    def func(self) -> Callable[..., Any]:
        return self._func

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self._invoke(None, args, kwargs)

    def call_with(self, context: object | None, /, *args: Any, **kwargs: Any) -> None:
        """Call the governor supplying an explicit call-site context."""

        self._invoke(context, args, kwargs)

    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return BoundGovernor(self, instance)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {describe(self._func)}>"

    @abstractmethod
    def _invoke(
        self,
        call_site_context: object | None,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
    ) -> None:
        """Decide whether, when and with what the wrapped callable runs."""


class BoundGovernor:
    """A governor accessed through an instance; the instance is the call-site context."""

    __slots__ = ("_governor", "_context")

    def __init__(self, governor: GovernorBase, context: object) -> None:
        self._governor = governor
        self._context = context

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self._governor.call_with(self._context, *args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._governor, name)

    def __repr__(self) -> str:
        return f"<bound {self._governor!r} of {self._context!r}>"


def wrap_or_decorate(
    factory: Callable[..., GovernorBase],
    func: Any,
    **options: Any,
) -> Any:
    """Wrap ``func`` with ``factory``, or return a decorator when ``func`` is None.

    Non-callable input is handed back unchanged.
    """

    if func is None:

        def decorator(target: Any) -> Any:
            return wrap_or_decorate(factory, target, **options)

        return decorator
    if not callable(func):
        logger.warning(
            "input is not callable; returning it unchanged type=%s",
            type(func).__name__,
        )
        return func
    return factory(func, **options)


__all__ = [
    "GovernorBase",
    "BoundGovernor",
    "wrap_or_decorate",
    "describe",
]
