"""Throttle, debounce and clocked governors."""

from .clocked import ClockData, Clocked, ControllerData, clocked
from .debounce import Debounced, debounce
from .throttle import Throttled, throttle

__all__ = [
    "Throttled",
    "Debounced",
    "Clocked",
    "ClockData",
    "ControllerData",
    "throttle",
    "debounce",
    "clocked",
]
