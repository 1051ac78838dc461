"""Captured invocations and context precedence."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any


def resolve_context(fixed: object | None, call_site: object | None) -> object | None:
    """Context fixed at wrap time wins over the one supplied at call time."""

    return fixed if fixed is not None else call_site


def forward(
    func: Callable[..., Any],
    context: object | None,
    args: tuple[Any, ...],
    kwargs: Mapping[str, Any],
) -> Any:
    if context is None:
        return func(*args, **kwargs)
    return func(context, *args, **kwargs)


@dataclass(slots=True, frozen=True)
class Invocation:
    """Arguments and context of one call to a governor."""

    context: object | None = None
    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def capture(
        cls,
        fixed_context: object | None,
        call_site_context: object | None,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
    ) -> Invocation:
        return cls(
            context=resolve_context(fixed_context, call_site_context),
            args=tuple(args),
            kwargs=dict(kwargs),
        )

    def replay(self, func: Callable[..., Any]) -> Any:
        return forward(func, self.context, self.args, self.kwargs)


__all__ = [
    "Invocation",
    "resolve_context",
    "forward",
]
