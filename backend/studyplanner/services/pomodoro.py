"""Pomodoro countdown state machine.

The scheduler owns its timer handle. Ticks only arrive while it is running;
pausing, resetting or closing the scheduler cancels the handle, so there is
never a timer left behind for a scheduler nobody is looking at.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from collections import OrderedDict
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

WORK_COMPLETED = "work_completed"
BREAK_COMPLETED = "break_completed"
RECORD_FAILED = "record_failed"


class PomodoroPhase(str, Enum):
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"


class PomodoroBusyError(RuntimeError):
    """Configuration changes are refused while the countdown runs."""


@dataclass(frozen=True)
class PomodoroConfig:
    work_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    intervals_before_long_break: int = 4

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer")

    def minutes_for(self, phase: PomodoroPhase) -> int:
        if phase == PomodoroPhase.WORK:
            return self.work_minutes
        if phase == PomodoroPhase.SHORT_BREAK:
            return self.short_break_minutes
        return self.long_break_minutes


class Ticker(Protocol):
    def start(self, callback: Callable[[], Any]) -> None: ...

    def cancel(self) -> None: ...

    @property
    def active(self) -> bool: ...


class AsyncioTicker:
    """Calls a callback once per interval from an asyncio task until cancelled."""

    def __init__(self, interval: float = 1.0):
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, callback: Callable[[], Any]) -> None:
        if self.active:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(callback))

    async def _run(self, callback: Callable[[], Any]) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                callback()
            except Exception:
                logger.exception("Ticker callback failed")

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None


# Called with the work length in minutes; returns something with .success/.error
RecordSession = Callable[[int], Any]
# Runs fn(*args) somewhere else and returns a future for its result
Offload = Callable[..., Any]


def offload_to_thread(fn: Callable[..., Any], *args: Any) -> asyncio.Future:
    """Run a blocking call on the running loop's default executor."""
    return asyncio.get_running_loop().run_in_executor(None, fn, *args)


class PomodoroScheduler:
    def __init__(
        self,
        config: PomodoroConfig | None = None,
        record_session: RecordSession | None = None,
        ticker: Ticker | None = None,
        offload: Offload | None = None,
    ):
        self.config = config or PomodoroConfig()
        self.record_session = record_session
        self.ticker = ticker or AsyncioTicker()
        # Without offload the recorder runs inline, inside tick()
        self.offload = offload
        self.phase = PomodoroPhase.WORK
        self.running = False
        self.remaining_seconds = self.config.work_minutes * 60
        self.completed_intervals = 0
        self.message: str | None = None

    @property
    def display(self) -> str:
        minutes, seconds = divmod(self.remaining_seconds, 60)
        return f"{minutes:02d}:{seconds:02d}"

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        self.ticker.start(self.tick)

    def pause(self) -> None:
        if not self.running:
            return
        self.running = False
        self.ticker.cancel()

    def toggle(self) -> bool:
        if self.running:
            self.pause()
        else:
            self.start()
        return self.running

    def reset(self) -> None:
        self.ticker.cancel()
        self.running = False
        self.phase = PomodoroPhase.WORK
        self.remaining_seconds = self.config.work_minutes * 60
        self.completed_intervals = 0
        self.message = None

    def close(self) -> None:
        self.running = False
        self.ticker.cancel()

    def configure(self, **changes: int) -> PomodoroConfig:
        if self.running:
            raise PomodoroBusyError("Pause the timer before changing its durations")
        values = asdict(self.config)
        unknown = set(changes) - set(values)
        if unknown:
            raise ValueError(f"Unknown pomodoro settings: {', '.join(sorted(unknown))}")
        values.update({key: value for key, value in changes.items() if value is not None})
        self.config = PomodoroConfig(**values)
        self.remaining_seconds = self.config.minutes_for(self.phase) * 60
        return self.config

    def tick(self) -> list[str]:
        """Advance the countdown by one second."""
        if not self.running:
            return []
        if self.remaining_seconds > 0:
            self.remaining_seconds -= 1
        if self.remaining_seconds > 0:
            return []
        return self._complete()

    def _complete(self) -> list[str]:
        if self.phase != PomodoroPhase.WORK:
            self.phase = PomodoroPhase.WORK
            self.remaining_seconds = self.config.work_minutes * 60
            return [BREAK_COMPLETED]

        minutes = self.config.work_minutes
        self.completed_intervals += 1
        if self.completed_intervals % self.config.intervals_before_long_break == 0:
            self.phase = PomodoroPhase.LONG_BREAK
        else:
            self.phase = PomodoroPhase.SHORT_BREAK
        self.remaining_seconds = self.config.minutes_for(self.phase) * 60

        events = [WORK_COMPLETED]
        if not self._record_work_interval(minutes):
            events.append(RECORD_FAILED)
        return events

    def _record_work_interval(self, minutes: int) -> bool:
        """Save a finished interval. False only when it is known to have failed."""
        if self.record_session is None:
            return True
        try:
            if self.offload is not None:
                future = self.offload(self.record_session, minutes)
                future.add_done_callback(self._record_finished)
                return True
            result = self.record_session(minutes)
        except Exception as exc:  # the countdown must keep going
            return self._record_outcome(None, exc)
        return self._record_outcome(result)

    def _record_finished(self, future: Any) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        self._record_outcome(None if exc else future.result(), exc)

    def _record_outcome(self, result: Any, exc: BaseException | None = None) -> bool:
        if exc is not None:
            logger.error(f"Recording pomodoro session failed: {exc}")
            self.message = f"Could not save the pomodoro session: {exc}"
            return False
        if result is not None and not getattr(result, "success", True):
            error = getattr(result, "error", None) or "unknown error"
            logger.warning(f"Pomodoro session was not saved: {error}")
            self.message = f"Could not save the pomodoro session: {error}"
            return False
        self.message = None
        return True

    def snapshot(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "running": self.running,
            "remaining_seconds": self.remaining_seconds,
            "display": self.display,
            "completed_intervals": self.completed_intervals,
            "config": asdict(self.config),
            "message": self.message,
        }


class PomodoroRegistry:
    """One scheduler per user, all torn down together on shutdown.

    Past max_entries the least recently used idle schedulers are closed and
    dropped. Running timers are never evicted.
    """

    def __init__(
        self,
        config_factory: Callable[[], PomodoroConfig],
        record_factory: Callable[[str], RecordSession] | None = None,
        ticker_factory: Callable[[], Ticker] | None = None,
        offload: Offload | None = None,
        max_entries: int = 1024,
    ):
        self._config_factory = config_factory
        self._record_factory = record_factory
        self._ticker_factory = ticker_factory or AsyncioTicker
        self._offload = offload
        self.max_entries = max_entries
        self._schedulers: OrderedDict[str, PomodoroScheduler] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._schedulers)

    def get(self, owner_id: str) -> PomodoroScheduler:
        with self._lock:
            scheduler = self._schedulers.get(owner_id)
            if scheduler is not None:
                self._schedulers.move_to_end(owner_id)
                return scheduler
            scheduler = PomodoroScheduler(
                config=self._config_factory(),
                record_session=self._record_factory(owner_id) if self._record_factory else None,
                ticker=self._ticker_factory(),
                offload=self._offload,
            )
            self._schedulers[owner_id] = scheduler
            self._evict_idle(keep=owner_id)
            return scheduler

    def _evict_idle(self, keep: str) -> None:
        excess = len(self._schedulers) - self.max_entries
        if excess <= 0:
            return
        idle = [
            owner_id
            for owner_id, scheduler in self._schedulers.items()
            if owner_id != keep and not scheduler.running
        ]
        for owner_id in idle[:excess]:
            self._schedulers.pop(owner_id).close()
            logger.info(f"Idle pomodoro timer dropped for owner {owner_id}")

    def close_all(self) -> None:
        with self._lock:
            for scheduler in self._schedulers.values():
                scheduler.close()
            self._schedulers.clear()
