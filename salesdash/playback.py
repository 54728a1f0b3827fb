from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from salesdash.errors import OutOfRangeError
from salesdash.selection import SelectionState


logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL_S = 0.9


class PlaybackState(str, Enum):
    STOPPED = "stopped"
    PLAYING = "playing"


class ScheduledTask:
    def __init__(self, interval: float, callback: Callable[[], None], next_due: float):
        self.interval = interval
        self.callback = callback
        self.next_due = next_due
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class CooperativeScheduler:
    """Recurring callbacks fired on the caller's thread by ``run_pending``.

    Nothing runs between calls, so a cancelled task can never fire afterwards.
    Missed intervals collapse into a single firing.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._tasks: List[ScheduledTask] = []

    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        if interval <= 0:
            raise ValueError("interval must be positive")
        task = ScheduledTask(interval, callback, self._clock() + interval)
        self._tasks.append(task)
        return task

    @property
    def pending(self) -> int:
        return sum(1 for t in self._tasks if not t.cancelled)

    def run_pending(self) -> int:
        now = self._clock()
        fired = 0
        for task in list(self._tasks):
            if task.cancelled or task.next_due > now:
                continue
            while task.next_due <= now:
                task.next_due += task.interval
            task.callback()
            fired += 1
        self._tasks = [t for t in self._tasks if not t.cancelled]
        return fired

    def seconds_until_next(self) -> Optional[float]:
        due = [t.next_due for t in self._tasks if not t.cancelled]
        if not due:
            return None
        return max(0.0, min(due) - self._clock())


class PlaybackController:
    def __init__(
        self,
        selection: SelectionState,
        scheduler: CooperativeScheduler,
        *,
        interval: float = DEFAULT_TICK_INTERVAL_S,
        on_tick: Optional[Callable[[int], None]] = None,
    ):
        self.selection = selection
        self.scheduler = scheduler
        self.interval = interval
        self.on_tick = on_tick
        self._task: Optional[ScheduledTask] = None
        self._state = PlaybackState.STOPPED

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is PlaybackState.PLAYING

    def start(self) -> None:
        if self.is_playing:
            return
        task = self.scheduler.call_every(self.interval, lambda: self._on_timer(task))
        self._task = task
        self._state = PlaybackState.PLAYING
        self.selection.is_playing = True
        logger.info("Playback started at %d", self.selection.current_year)

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
        if self.is_playing:
            logger.info("Playback stopped at %d", self.selection.current_year)
        self._state = PlaybackState.STOPPED
        self.selection.is_playing = False

    def toggle(self) -> PlaybackState:
        if self.is_playing:
            self.stop()
        else:
            self.start()
        return self._state

    def teardown(self) -> None:
        self.stop()

    def next_year(self) -> int:
        sel = self.selection
        year = sel.current_year + 1
        if year > sel.year_range_end:
            year = sel.year_range_start
        return year

    def tick(self) -> int:
        year = self.next_year()
        try:
            self.selection.set_current_year(year)
        except OutOfRangeError:
            logger.warning("Playback tick rejected year %d", year, exc_info=True)
            return self.selection.current_year
        logger.debug("Playback tick -> %d", year)
        if self.on_tick is not None:
            self.on_tick(year)
        return year

    def _on_timer(self, task: ScheduledTask) -> None:
        # a tick from a task that has since been replaced or cancelled is dropped
        if task is not self._task or task.cancelled or not self.is_playing:
            return
        self.tick()
