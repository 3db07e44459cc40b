"""Timer manager component: fires timer bodies while the session is logged in."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

from ...engine.executor import EchoStep, ExpansionExecutor
from ...engine.scheduler import Scheduler, Sleep
from ...shared.models.timer import Timer
from ..core.config import ClientSettings

LOGGER = logging.getLogger("TimerManager")

ANTI_IDLE_ID = "anti-idle"

TimerKey = tuple[str, Any]


def timer_key(timer: Timer) -> TimerKey:
    # ids may repeat across scopes; creation time tells the two records apart
    return (timer.id, timer.created_at)


def anti_idle_timer(settings: ClientSettings) -> Timer | None:
    if not settings.anti_idle_enabled or not settings.anti_idle_command.strip():
        return None
    return Timer(
        id=ANTI_IDLE_ID,
        name="anti-idle",
        body=settings.anti_idle_command,
        interval_seconds=settings.anti_idle_minutes * 60,
    )


class TimerManager:
    """One asyncio loop per schedulable timer.

    Loops only exist between ``start`` (connected and logged in) and
    ``stop`` (disconnect or character switch). Disabled timers and timers
    with ``interval_seconds <= 0`` never get a loop.
    """

    def __init__(
        self,
        timers: Callable[[], Iterable[Timer]],
        executor: ExpansionExecutor,
        scheduler: Scheduler,
        settings: ClientSettings,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        on_fired: Callable[[], Any] | None = None,
    ) -> None:
        self._timers = timers
        self.executor = executor
        self.scheduler = scheduler
        self.settings = settings
        self._sleep = sleep
        self._clock = clock
        # called after every fire, e.g. to persist /var writes
        self._on_fired = on_fired
        self._loops: list[asyncio.Task] = []
        # timer_key → clock value of the next fire
        self._next_fire: dict[TimerKey, float] = {}
        self.active = False

    def _schedulable(self) -> list[Timer]:
        timers = [timer for timer in self._timers() if timer.schedulable]
        idle = anti_idle_timer(self.settings)
        if idle is not None:
            timers.append(idle)
        return timers

    def start(self) -> None:
        """Start a loop for every schedulable timer. Needs a running event loop."""
        self.stop()
        self.active = True
        loop = asyncio.get_running_loop()
        for timer in self._schedulable():
            self._loops.append(loop.create_task(self._timer_loop(timer)))
        LOGGER.info(f"TimerManager started, {len(self._loops)} timer(s) scheduled")

    def stop(self) -> None:
        for task in self._loops:
            task.cancel()
        if self._loops:
            LOGGER.info(f"TimerManager stopped, {len(self._loops)} timer(s) cancelled")
        self._loops.clear()
        self._next_fire.clear()
        self.active = False

    def refresh(self) -> None:
        """Pick up timer edits; a no-op while stopped."""
        if self.active:
            self.start()

    async def _timer_loop(self, timer: Timer) -> None:
        while True:
            self._next_fire[timer_key(timer)] = self._clock() + timer.interval_seconds
            await self._sleep(timer.interval_seconds)
            self.fire(timer)

    def fire(self, timer: Timer) -> None:
        """Expand and schedule one firing of *timer*."""
        try:
            steps = self.executor.expand_timer(timer)
        except Exception as e:
            LOGGER.error(f"Timer '{timer.name}' expansion failed: {e}")
            return
        if timer.id != ANTI_IDLE_ID:
            steps = [EchoStep(f"[timer: {timer.name}]"), *steps]
        self.scheduler.spawn(steps)
        if self._on_fired is not None:
            self._on_fired()
        LOGGER.info(f"Timer '{timer.name}' fired")

    def next_fires(self) -> dict[TimerKey, float]:
        """Seconds until each running timer fires next, keyed by ``timer_key``."""
        now = self._clock()
        return {key: max(0.0, due - now) for key, due in self._next_fire.items()}

    @property
    def running(self) -> int:
        return len(self._loops)
