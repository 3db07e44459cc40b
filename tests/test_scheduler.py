import asyncio

from dartmacro.engine.executor import DelayStep, EchoStep, SendStep
from dartmacro.engine.scheduler import Scheduler


class FakeIO:
    def __init__(self, connected: bool = True) -> None:
        self.connected = connected
        self.events: list[tuple[str, str]] = []

    def send(self, text: str) -> None:
        self.events.append(("send", text))

    def echo(self, text: str) -> None:
        self.events.append(("echo", text))


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)


class TestRun:
    def test_in_order_with_delay(self):
        io, sleep = FakeIO(), RecordingSleep()
        steps = [SendStep("n"), DelayStep(250), EchoStep("moved"), SendStep("s")]
        asyncio.run(Scheduler(io, sleep).run(steps))
        assert io.events == [("send", "n"), ("echo", "moved"), ("send", "s")]
        assert sleep.calls == [0.25]

    def test_disconnect_drops_sends_keeps_echoes(self):
        io = FakeIO()

        async def drop_then_sleep(seconds: float) -> None:
            io.connected = False

        steps = [SendStep("a"), DelayStep(10), SendStep("b"), EchoStep("still here")]
        asyncio.run(Scheduler(io, drop_then_sleep).run(steps))
        assert io.events == [("send", "a"), ("echo", "still here")]

    def test_send_failure_is_dropped(self):
        class FlakyIO(FakeIO):
            def send(self, text: str) -> None:
                if text == "boom":
                    raise ConnectionError("socket closed")
                super().send(text)

        io = FlakyIO()
        asyncio.run(Scheduler(io, RecordingSleep()).run([SendStep("boom"), SendStep("ok")]))
        assert io.events == [("send", "ok")]

    def test_async_io(self):
        sent: list[str] = []

        class AsyncIO:
            connected = True

            async def send(self, text: str) -> None:
                sent.append(text)

            async def echo(self, text: str) -> None:
                sent.append(f"echo:{text}")

        asyncio.run(Scheduler(AsyncIO()).run([SendStep("x"), EchoStep("y")]))
        assert sent == ["x", "echo:y"]


class TestTasks:
    def test_sequences_interleave(self):
        io = FakeIO()

        async def main() -> None:
            scheduler = Scheduler(io, RecordingSleep())
            first = scheduler.spawn([SendStep("a1"), DelayStep(1), SendStep("a2")])
            second = scheduler.spawn([SendStep("b1")])
            await asyncio.gather(first, second)

        asyncio.run(main())
        assert io.events == [("send", "a1"), ("send", "b1"), ("send", "a2")]

    def test_cancel_all(self):
        io = FakeIO()

        async def main() -> int:
            scheduler = Scheduler(io)
            scheduler.spawn([SendStep("now"), DelayStep(60_000), SendStep("never")])
            await asyncio.sleep(0)
            cancelled = scheduler.cancel_all()
            await asyncio.sleep(0)
            return cancelled

        assert asyncio.run(main()) == 1
        assert io.events == [("send", "now")]

    def test_spawn_nothing(self):
        async def main():
            return Scheduler(FakeIO()).spawn([])

        assert asyncio.run(main()) is None


def test_echo_failure_does_not_end_the_sequence():
    class BrokenDisplayIO(FakeIO):
        def echo(self, text: str) -> None:
            if text == "bad":
                raise RuntimeError("display gone")
            super().echo(text)

    io = BrokenDisplayIO()
    asyncio.run(Scheduler(io, RecordingSleep()).run([EchoStep("bad"), SendStep("after")]))
    assert io.events == [("send", "after")]
