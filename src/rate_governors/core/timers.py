"""Timer service contract and thread-based implementation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from types import TracebackType
from typing import Any, Protocol

from .errors import TimerServiceClosedError

logger = logging.getLogger("rate_governors")


class TimerService(Protocol):
    """One-shot timer scheduling contract used by every governor."""

    def schedule(self, delay_ms: int, fn: Callable[..., Any], *args: Any) -> Any:
        """Run ``fn(*args)`` once, no sooner than ``delay_ms`` from now."""

    def cancel(self, handle: Any) -> None:
        """Cancel a scheduled run; no-op if it already ran or was cancelled."""


class ThreadingTimerService:
    """Timer service backed by daemon ``threading.Timer`` threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timers: set[threading.Timer] = set()
        self._closed = False

    def __enter__(self) -> ThreadingTimerService:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def schedule(self, delay_ms: int, fn: Callable[..., Any], *args: Any) -> threading.Timer:
        timer: threading.Timer

        def _run() -> None:
            with self._lock:
                self._timers.discard(timer)
            fn(*args)

        timer = threading.Timer(max(delay_ms, 0) / 1000.0, _run)
        timer.daemon = True
        with self._lock:
            if self._closed:
                raise TimerServiceClosedError("timer service is already closed")
            self._timers.add(timer)
        timer.start()
        return timer

    def cancel(self, handle: Any) -> None:
        if handle is None:
            return
        handle.cancel()
        with self._lock:
            self._timers.discard(handle)

    def pending_count(self) -> int:
        with self._lock:
            return len(self._timers)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            timers = list(self._timers)
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        logger.debug("timer service closed cancelled=%s", len(timers))


_default_service: ThreadingTimerService | None = None
_default_lock = threading.Lock()


def default_timer_service() -> ThreadingTimerService:
    """Return the shared thread-based timer service, creating it on first use."""

    global _default_service
    with _default_lock:
        if _default_service is None or _default_service.closed:
            _default_service = ThreadingTimerService()
        return _default_service


__all__ = [
    "TimerService",
    "ThreadingTimerService",
    "default_timer_service",
]
