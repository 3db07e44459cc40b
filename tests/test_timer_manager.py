import asyncio
from datetime import UTC, datetime

from dartmacro.client.components.timer_manager import ANTI_IDLE_ID, TimerManager, anti_idle_timer
from dartmacro.client.core.config import ClientSettings
from dartmacro.engine.executor import ExpansionExecutor
from dartmacro.engine.scheduler import Scheduler
from dartmacro.shared.models import Timer
from dartmacro.shared.repositories import VariableRepository
from tests.test_scheduler import FakeIO

_CREATED = (datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 2, 1, tzinfo=UTC))


class GateSleep:
    """Lets the first ``free`` sleeps through, then blocks forever."""

    def __init__(self, free: int = 1) -> None:
        self.free = free
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if len(self.calls) > self.free:
            await asyncio.Event().wait()


async def _ticks(count: int = 5) -> None:
    for _ in range(count):
        await asyncio.sleep(0)


def _manager(timers, sleep, settings=None, clock=lambda: 100.0):
    io = FakeIO()
    executor = ExpansionExecutor(lambda: [], VariableRepository(), lambda: "Gandalf")
    manager = TimerManager(
        lambda: timers,
        executor,
        Scheduler(io, sleep),
        settings or ClientSettings(),
        sleep,
        clock,
    )
    return manager, io


def test_timer_fires_with_name_echo():
    timers = [Timer(id="hb", name="heartbeat", body="say $me alive", interval_seconds=30)]
    sleep = GateSleep(free=1)

    async def main():
        manager, io = _manager(timers, sleep)
        manager.start()
        await _ticks()
        running = manager.running
        manager.stop()
        return running, io.events

    running, events = asyncio.run(main())
    assert running == 1
    assert sleep.calls[0] == 30
    assert events == [("echo", "[timer: heartbeat]"), ("send", "say gandalf alive")]


def test_disabled_and_zero_interval_timers_never_scheduled():
    timers = [
        Timer(id="off", name="off", body="x", interval_seconds=5, enabled=False),
        Timer(id="zero", name="zero", body="x", interval_seconds=0),
    ]

    async def main():
        manager, _ = _manager(timers, GateSleep(free=0))
        manager.start()
        running = manager.running
        manager.stop()
        return running

    assert asyncio.run(main()) == 0


def test_next_fires_counts_down():
    timers = [Timer(id="t", name="t", body="x", interval_seconds=60)]
    now = [100.0]

    async def main():
        manager, _ = _manager(timers, GateSleep(free=0), clock=lambda: now[0])
        manager.start()
        await _ticks()
        now[0] += 15
        remaining = manager.next_fires()
        manager.stop()
        return remaining, manager.next_fires(), manager.active

    remaining, after_stop, active = asyncio.run(main())
    assert remaining == {("t", None): 45.0}
    assert after_stop == {}
    assert active is False


def test_refresh_is_noop_while_stopped():
    timers = [Timer(id="t", name="t", body="x", interval_seconds=60)]
    manager, _ = _manager(timers, GateSleep(free=0))
    manager.refresh()
    assert manager.running == 0


def test_anti_idle_timer():
    assert anti_idle_timer(ClientSettings(anti_idle_enabled=False)) is None
    assert anti_idle_timer(ClientSettings(anti_idle_enabled=True, anti_idle_command="  ")) is None
    idle = anti_idle_timer(ClientSettings(anti_idle_enabled=True, anti_idle_minutes=5))
    assert idle.id == ANTI_IDLE_ID
    assert idle.interval_seconds == 300


def test_anti_idle_fires_without_echo():
    settings = ClientSettings(anti_idle_enabled=True, anti_idle_command="idle", anti_idle_minutes=1)

    async def main():
        manager, io = _manager([], GateSleep(free=1), settings=settings)
        manager.start()
        await _ticks()
        manager.stop()
        return io.events

    assert asyncio.run(main()) == [("send", "idle")]


async def _yield(seconds: float) -> None:
    await asyncio.sleep(0)


def test_timers_sharing_an_id_are_all_stopped():
    timers = [
        Timer(id="same", name="char", body="say a", interval_seconds=5, created_at=_CREATED[0]),
        Timer(id="same", name="global", body="say b", interval_seconds=5, created_at=_CREATED[1]),
    ]

    async def main():
        manager, io = _manager(timers, _yield)
        manager.start()
        running = manager.running
        await _ticks(3)
        fires = set(manager.next_fires())
        manager.stop()
        manager.scheduler.cancel_all()
        before = list(io.events)
        await _ticks(20)
        return running, fires, before, io.events

    running, fires, before, after = asyncio.run(main())
    assert running == 2
    assert len(fires) == 2
    assert ("echo", "[timer: char]") in before and ("echo", "[timer: global]") in before
    assert after == before


def test_on_fired_called_after_each_fire():
    timers = [Timer(id="t", name="t", body="/var hits 1", interval_seconds=5)]
    calls: list[int] = []

    async def main():
        io = FakeIO()
        manager = TimerManager(
            lambda: timers,
            ExpansionExecutor(lambda: [], VariableRepository()),
            Scheduler(io),
            ClientSettings(),
            GateSleep(free=2),
            on_fired=lambda: calls.append(1),
        )
        manager.start()
        await _ticks()
        manager.stop()

    asyncio.run(main())
    assert calls == [1, 1]
