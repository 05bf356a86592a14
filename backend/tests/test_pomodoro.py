import asyncio
import time
from concurrent.futures import Future
from types import SimpleNamespace

import pytest

from studyplanner.services.pomodoro import (
    BREAK_COMPLETED,
    RECORD_FAILED,
    WORK_COMPLETED,
    AsyncioTicker,
    PomodoroBusyError,
    PomodoroConfig,
    PomodoroPhase,
    PomodoroRegistry,
    PomodoroScheduler,
    offload_to_thread,
)


class FakeTicker:
    def __init__(self):
        self.callback = None
        self.started = 0
        self.cancelled = 0

    @property
    def active(self):
        return self.callback is not None

    def start(self, callback):
        self.started += 1
        self.callback = callback

    def cancel(self):
        self.cancelled += 1
        self.callback = None


def _run_phase(scheduler: PomodoroScheduler) -> list[str]:
    events = []
    for _ in range(scheduler.remaining_seconds):
        events = scheduler.tick()
    return events


def _build_scheduler(record_session=None, **config):
    ticker = FakeTicker()
    scheduler = PomodoroScheduler(PomodoroConfig(**config), record_session, ticker)
    return scheduler, ticker


def test_initial_state():
    scheduler, _ = _build_scheduler()
    assert scheduler.phase == PomodoroPhase.WORK
    assert scheduler.display == "25:00"
    assert scheduler.completed_intervals == 0
    assert not scheduler.running


def test_fourth_break_is_long():
    recorded = []
    scheduler, _ = _build_scheduler(record_session=recorded.append)
    scheduler.start()

    breaks = []
    for _ in range(4):
        assert _run_phase(scheduler) == [WORK_COMPLETED]
        breaks.append((scheduler.phase, scheduler.remaining_seconds))
        assert _run_phase(scheduler) == [BREAK_COMPLETED]
        assert scheduler.phase == PomodoroPhase.WORK

    assert breaks == [
        (PomodoroPhase.SHORT_BREAK, 300),
        (PomodoroPhase.SHORT_BREAK, 300),
        (PomodoroPhase.SHORT_BREAK, 300),
        (PomodoroPhase.LONG_BREAK, 900),
    ]
    assert recorded == [25, 25, 25, 25]
    assert scheduler.completed_intervals == 4


def test_ticks_are_ignored_while_paused():
    scheduler, ticker = _build_scheduler()
    scheduler.start()
    scheduler.tick()
    scheduler.pause()
    assert ticker.cancelled == 1
    assert not ticker.active

    scheduler.tick()
    assert scheduler.remaining_seconds == 25 * 60 - 1
    assert scheduler.display == "24:59"


def test_toggle_starts_and_pauses():
    scheduler, ticker = _build_scheduler()
    assert scheduler.toggle() is True
    assert ticker.active
    assert scheduler.toggle() is False
    assert not ticker.active


def test_start_twice_keeps_one_timer():
    scheduler, ticker = _build_scheduler()
    scheduler.start()
    scheduler.start()
    assert ticker.started == 1


def test_record_failure_still_advances():
    failing = lambda minutes: SimpleNamespace(success=False, error="database is locked")
    scheduler, _ = _build_scheduler(record_session=failing)
    scheduler.start()

    events = _run_phase(scheduler)

    assert events == [WORK_COMPLETED, RECORD_FAILED]
    assert scheduler.phase == PomodoroPhase.SHORT_BREAK
    assert scheduler.completed_intervals == 1
    assert "database is locked" in scheduler.message


def test_record_exception_still_advances():
    def explode(minutes):
        raise RuntimeError("boom")

    scheduler, _ = _build_scheduler(record_session=explode, work_minutes=1)
    scheduler.start()

    assert _run_phase(scheduler) == [WORK_COMPLETED, RECORD_FAILED]
    assert scheduler.phase == PomodoroPhase.SHORT_BREAK
    assert "boom" in scheduler.message


def test_reset_returns_to_initial_state():
    scheduler, ticker = _build_scheduler(work_minutes=1)
    scheduler.start()
    _run_phase(scheduler)
    scheduler.tick()

    scheduler.reset()

    assert not scheduler.running
    assert not ticker.active
    assert scheduler.phase == PomodoroPhase.WORK
    assert scheduler.remaining_seconds == 60
    assert scheduler.completed_intervals == 0
    assert scheduler.message is None


def test_configure_is_refused_while_running():
    scheduler, _ = _build_scheduler()
    scheduler.start()
    with pytest.raises(PomodoroBusyError):
        scheduler.configure(work_minutes=50)
    assert scheduler.config.work_minutes == 25


def test_configure_resets_current_phase_length():
    scheduler, _ = _build_scheduler()
    scheduler.configure(work_minutes=50, short_break_minutes=None)
    assert scheduler.config.work_minutes == 50
    assert scheduler.config.short_break_minutes == 5
    assert scheduler.display == "50:00"


def test_configure_validates_values():
    scheduler, _ = _build_scheduler()
    with pytest.raises(ValueError):
        scheduler.configure(work_minutes=0)
    with pytest.raises(ValueError):
        scheduler.configure(snooze_minutes=3)
    with pytest.raises(ValueError):
        PomodoroConfig(intervals_before_long_break=True)


def test_snapshot():
    scheduler, _ = _build_scheduler(work_minutes=30)
    state = scheduler.snapshot()
    assert state["phase"] == "work"
    assert state["display"] == "30:00"
    assert state["config"]["work_minutes"] == 30


def test_registry_keeps_one_scheduler_per_owner_and_closes_all():
    tickers = []

    def ticker_factory():
        ticker = FakeTicker()
        tickers.append(ticker)
        return ticker

    registry = PomodoroRegistry(PomodoroConfig, ticker_factory=ticker_factory)
    first = registry.get("ana")
    assert registry.get("ana") is first
    second = registry.get("luis")
    first.start()
    second.start()

    registry.close_all()

    assert not first.running and not second.running
    assert all(not ticker.active for ticker in tickers)


def test_asyncio_ticker_stops_after_cancel():
    async def scenario():
        calls = []
        ticker = AsyncioTicker(interval=0.01)
        ticker.start(lambda: calls.append(1))
        assert ticker.active
        await asyncio.sleep(0.08)
        ticker.cancel()
        assert not ticker.active
        seen = len(calls)
        await asyncio.sleep(0.05)
        return seen, len(calls)

    seen, after = asyncio.run(scenario())
    assert seen >= 2
    assert after == seen


def test_scheduler_counts_down_on_asyncio_ticker():
    async def scenario():
        scheduler = PomodoroScheduler(PomodoroConfig(), ticker=AsyncioTicker(interval=0.01))
        scheduler.start()
        await asyncio.sleep(0.08)
        scheduler.pause()
        return scheduler.remaining_seconds

    assert asyncio.run(scenario()) < 25 * 60


def _run_now(fn, *args):
    future = Future()
    try:
        future.set_result(fn(*args))
    except Exception as exc:
        future.set_exception(exc)
    return future


def test_offloaded_record_failure_sets_message():
    def explode(minutes):
        raise RuntimeError("database is locked")

    scheduler = PomodoroScheduler(
        PomodoroConfig(work_minutes=1), explode, FakeTicker(), offload=_run_now
    )
    scheduler.start()

    assert _run_phase(scheduler) == [WORK_COMPLETED]
    assert scheduler.phase == PomodoroPhase.SHORT_BREAK
    assert "database is locked" in scheduler.message


def test_offloaded_record_success_clears_message():
    scheduler = PomodoroScheduler(
        PomodoroConfig(work_minutes=1),
        lambda minutes: SimpleNamespace(success=True),
        FakeTicker(),
        offload=_run_now,
    )
    scheduler.message = "Could not save the pomodoro session: earlier failure"
    scheduler.start()
    _run_phase(scheduler)
    assert scheduler.message is None


def test_cancelled_record_is_ignored():
    future = Future()
    future.cancel()
    scheduler, _ = _build_scheduler()
    scheduler.message = "kept"
    scheduler._record_finished(future)
    assert scheduler.message == "kept"


def test_slow_recorder_does_not_stall_the_event_loop():
    recorded = []

    def slow_record(minutes):
        time.sleep(0.3)
        recorded.append(minutes)
        return SimpleNamespace(success=True)

    async def scenario():
        loop = asyncio.get_running_loop()
        scheduler = PomodoroScheduler(
            PomodoroConfig(work_minutes=1, short_break_minutes=60),
            slow_record,
            AsyncioTicker(interval=0.001),
            offload=offload_to_thread,
        )
        scheduler.start()
        longest_gap = 0.0
        last = loop.time()
        deadline = last + 0.8
        while loop.time() < deadline:
            await asyncio.sleep(0.01)
            now = loop.time()
            longest_gap = max(longest_gap, now - last)
            last = now
        scheduler.pause()
        return scheduler, longest_gap

    scheduler, longest_gap = asyncio.run(scenario())

    assert longest_gap < 0.1
    assert scheduler.completed_intervals == 1
    assert scheduler.phase == PomodoroPhase.SHORT_BREAK
    assert recorded == [1]
    assert scheduler.message is None


def test_ticker_keeps_running_after_a_failing_callback():
    async def scenario():
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("first tick failed")

        ticker = AsyncioTicker(interval=0.01)
        ticker.start(flaky)
        await asyncio.sleep(0.08)
        active = ticker.active
        ticker.cancel()
        return len(calls), active

    calls, active = asyncio.run(scenario())
    assert calls >= 2
    assert active


def test_registry_drops_least_recently_used_idle_timers():
    registry = PomodoroRegistry(PomodoroConfig, ticker_factory=FakeTicker, max_entries=2)
    busy = registry.get("ana")
    busy.start()
    idle = registry.get("luis")
    registry.get("ana")

    registry.get("eva")

    assert len(registry) == 2
    assert registry.get("ana") is busy
    assert registry.get("luis") is not idle


def test_registry_never_drops_running_timers():
    registry = PomodoroRegistry(PomodoroConfig, ticker_factory=FakeTicker, max_entries=1)
    first = registry.get("ana")
    first.start()

    second = registry.get("luis")

    assert registry.get("ana") is first
    assert registry.get("luis") is second
    assert first.running
