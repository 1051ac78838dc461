from __future__ import annotations

import pytest

from rate_governors import ClockData, Clocked, ControllerData, clocked
from rate_governors.config import ClockedConfig, GovernorConfig
from tests.shared.virtual_timers import CallRecorder, RecordingTimerService, VirtualTimerService


def _clocked(func, timers, **kwargs) -> Clocked:
    return clocked(func, clock=timers.now, timer_service=timers, **kwargs)


def test_ticks_every_interval_until_terminated(timers: VirtualTimerService, recorder: CallRecorder):
    governed = _clocked(recorder, timers, interval=100)
    assert not governed.is_active()

    governed("x", n=1)
    assert governed.is_active()
    assert governed.count == 0
    assert governed.start_time == 0
    assert recorder.calls == []

    timers.advance_to(350)
    assert recorder.calls == [(at, ("x",), {"n": 1}) for at in (100, 200, 300)]
    assert governed.count == 3

    governed.terminate()
    assert not governed.is_active()
    assert governed.count is None
    assert governed.start_time is None

    timers.advance_to(1000)
    assert recorder.times == [100, 200, 300]
    assert timers.pending() == []


def test_reinvocation_restarts_the_cycle(timers: VirtualTimerService, recorder: CallRecorder):
    governed = _clocked(recorder, timers, interval=100)
    governed("first")
    timers.advance_to(150)
    assert governed.count == 1

    governed("second")
    assert governed.count == 0
    assert governed.start_time == 150
    assert len(timers.pending()) == 1

    timers.advance_to(260)
    assert recorder.calls == [(100, ("first",), {}), (250, ("second",), {})]


def test_controller_terminating_after_five_ticks_stops_the_cycle(timers: VirtualTimerService):
    seen: list[int] = []

    def controller(data: ControllerData) -> None:
        if data.clock.count > 5:
            data.terminate()
        else:
            data.proceed_captured()

    governed = _clocked(lambda n: seen.append(n), timers, interval=50, controller=controller)
    governed(7)
    timers.advance_to(1000)

    assert seen == [7, 7, 7, 7, 7]
    assert not governed.is_active()
    assert timers.pending() == []


def test_controller_receives_snapshot(timers: VirtualTimerService):
    snapshots: list[ControllerData] = []
    target = object()
    governed = _clocked(
        lambda *args, **kwargs: None,
        timers,
        interval=50,
        target=target,
        controller=snapshots.append,
    )
    governed(1, 2, key="value")
    timers.advance_to(100)

    first, second = snapshots
    assert first.clock == ClockData(interval=50, start_time=0, timestamp=50, count=1)
    assert second.clock.count == 2
    assert second.clock.elapsed_ms == 100
    assert first.target is target
    assert first.args == (1, 2)
    assert first.kwargs == {"key": "value"}
    assert first.kwargs is not second.kwargs


def test_controller_without_proceed_never_calls_original(timers: VirtualTimerService):
    seen: list[object] = []
    governed = _clocked(seen.append, timers, interval=10, controller=lambda data: None)
    governed("x")
    timers.advance_to(100)
    assert seen == []
    assert governed.count == 10


def test_controller_can_proceed_with_its_own_context_and_args(timers: VirtualTimerService):
    seen: list[tuple[object, ...]] = []

    def controller(data: ControllerData) -> None:
        data.proceed("ctx", data.clock.count)
        if data.clock.count == 2:
            data.terminate()

    governed = _clocked(lambda *args: seen.append(args), timers, interval=10, controller=controller)
    governed()
    timers.advance_to(100)
    assert seen == [("ctx", 1), ("ctx", 2)]


def test_controller_restarting_the_governor_does_not_stack_timers(timers: VirtualTimerService):
    restarted: list[int] = []

    def controller(data: ControllerData) -> None:
        if data.clock.count == 2 and not restarted:
            restarted.append(data.clock.timestamp)
            governed("again")

    governed = _clocked(lambda *args: None, timers, interval=10, controller=controller)
    governed("start")
    timers.advance_to(20)

    assert restarted == [20]
    assert governed.start_time == 20
    assert governed.count == 0
    assert len(timers.pending()) == 1


def test_target_is_passed_to_original_without_controller(timers: VirtualTimerService):
    seen: list[tuple[object, ...]] = []
    governed = _clocked(lambda *args: seen.append(args), timers, interval=10, target="greeting")
    governed.call_with("ignored", "Mrs Smith")
    timers.advance_to(10)
    governed.terminate()
    assert seen == [("greeting", "Mrs Smith")]


def test_call_site_context_used_without_target(timers: VirtualTimerService):
    class Greeter:
        def __init__(self) -> None:
            self.greeted: list[str] = []

        @clocked(interval=10, clock=timers.now, timer_service=timers)
        def greet(self, name: str) -> None:
            self.greeted.append(name)

    greeter = Greeter()
    greeter.greet("Mr Snider")
    timers.advance_to(30)
    greeter.greet.terminate()

    assert greeter.greeted == ["Mr Snider"] * 3
    assert not greeter.greet.is_active()


def test_terminate_is_idempotent(timers: VirtualTimerService):
    governed = _clocked(lambda: None, timers, interval=10)
    governed.terminate()
    governed()
    governed.terminate()
    governed.terminate()
    assert not governed.is_active()


def test_failing_tick_keeps_cycle_armed(timers: VirtualTimerService):
    def boom() -> None:
        raise RuntimeError("boom")

    governed = _clocked(boom, timers, interval=10)
    governed()
    with pytest.raises(RuntimeError, match="boom"):
        timers.advance_to(10)
    assert governed.is_active()
    assert len(timers.pending()) == 1
    governed.terminate()


def test_start_is_an_alias_for_calling(timers: VirtualTimerService, recorder: CallRecorder):
    governed = _clocked(recorder, timers, interval=10)
    governed.start("s")
    timers.advance_to(10)
    governed.terminate()
    assert recorder.calls == [(10, ("s",), {})]


def test_late_tick_keeps_grid_alignment():
    now = {"value": 0}
    scheduled: list[int] = []
    callbacks: list[tuple[object, tuple[object, ...]]] = []

    class RecordingTimers:
        def schedule(self, delay_ms, fn, *args):
            scheduled.append(delay_ms)
            callbacks.append((fn, args))
            return len(callbacks)

        def cancel(self, handle):
            return None

    governed = Clocked(
        lambda: None,
        100,
        clock=lambda: now["value"],
        timer_service=RecordingTimers(),
    )
    governed()
    fn, args = callbacks[-1]
    now["value"] = 130
    fn(*args)
    assert scheduled == [100, 70]


@pytest.mark.parametrize(("interval", "expected"), [(None, 200), (0, 200), ("-3", 200), ("40", 40)])
def test_interval_is_sanitized(interval, expected, timers: VirtualTimerService):
    assert _clocked(lambda: None, timers, interval=interval).interval_ms == expected


def test_default_interval_comes_from_config(timers: VirtualTimerService):
    config = GovernorConfig(clocked=ClockedConfig(interval_ms=5))
    assert _clocked(lambda: None, timers, config=config).interval_ms == 5


def test_non_callable_is_returned_unchanged():
    sentinel = object()
    assert clocked(sentinel, 100) is sentinel


def test_clock_reading_behind_timer_does_not_add_ticks():
    readings = iter([0, 99])
    service = RecordingTimerService()
    governed = Clocked(lambda: None, 100, clock=lambda: next(readings), timer_service=service)
    governed()
    service.run(0)

    assert service.delays == [100, 101]
    assert governed.count == 1


def test_coarse_clock_keeps_one_tick_per_interval(timers: VirtualTimerService, recorder: CallRecorder):
    governed = clocked(
        recorder,
        100,
        clock=lambda: timers.now() // 16 * 16,
        timer_service=timers,
    )
    governed()
    timers.advance_to(1000)
    governed.terminate()

    assert recorder.times == [100, 204, 312, 408, 508, 612, 704, 800, 900]


def test_very_late_tick_skips_missed_slots():
    readings = iter([0, 350])
    service = RecordingTimerService()
    governed = Clocked(lambda: None, 100, clock=lambda: next(readings), timer_service=service)
    governed()
    service.run(0)
    assert service.delays == [100, 50]


def test_tick_from_previous_cycle_is_dropped_after_restart():
    seen: list[str] = []
    service = RecordingTimerService()
    governed = Clocked(seen.append, 100, clock=lambda: 0, timer_service=service)
    governed("old")
    governed("new")

    service.run(0)
    assert seen == []
    assert governed.count == 0
    service.run(1)
    assert seen == ["new"]


def test_tick_after_terminate_is_dropped():
    seen: list[str] = []
    service = RecordingTimerService()
    governed = Clocked(seen.append, 100, clock=lambda: 0, timer_service=service)
    governed("x")
    governed.terminate()

    service.run(0)
    assert seen == []
    assert not governed.is_active()
    assert governed.count is None
