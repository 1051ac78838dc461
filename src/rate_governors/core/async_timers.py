"""Asyncio event-loop timer service."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from .errors import TimerServiceUnavailableError


class AsyncioTimerService:
    """Timer service scheduling callbacks with ``loop.call_later``.

    Callbacks run on the loop thread, so governors driven by this service
    never see concurrent callbacks.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as exc:
            raise TimerServiceUnavailableError(
                "no running event loop to schedule on",
                cause="no_event_loop",
            ) from exc

    def schedule(
        self,
        delay_ms: int,
        fn: Callable[..., Any],
        *args: Any,
    ) -> asyncio.TimerHandle:
        return self._resolve_loop().call_later(max(delay_ms, 0) / 1000.0, fn, *args)

    def cancel(self, handle: Any) -> None:
        if handle is None:
            return
        handle.cancel()

    def loop_clock_ms(self) -> int:
        """Read the loop's own clock in milliseconds."""

        return int(self._resolve_loop().time() * 1000)


__all__ = [
    "AsyncioTimerService",
]
