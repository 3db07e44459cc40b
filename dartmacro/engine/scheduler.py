"""Scheduler: drives an expanded step list against the connection and display."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

from .executor import DelayStep, EchoStep, SendStep, Step

LOGGER = logging.getLogger("Scheduler")

Sleep = Callable[[float], Awaitable[Any]]


class CommandIO(Protocol):
    """What the scheduler needs from its host.

    ``send`` and ``echo`` may be plain functions or coroutines.
    """

    @property
    def connected(self) -> bool: ...

    def send(self, text: str) -> Any: ...

    def echo(self, text: str) -> Any: ...


async def _call(func: Callable[[str], Any], text: str) -> None:
    result = func(text)
    if inspect.isawaitable(result):
        await result


class Scheduler:
    """Runs step sequences as independent asyncio tasks.

    Steps of one sequence run strictly in order; a delay only suspends its
    own sequence. There is no ordering between sequences.
    """

    def __init__(self, io: CommandIO, sleep: Sleep = asyncio.sleep) -> None:
        self.io = io
        self._sleep = sleep
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def run(self, steps: Sequence[Step]) -> None:
        dropped = 0
        for step in steps:
            if isinstance(step, SendStep):
                if not self.io.connected:
                    dropped += 1
                    continue
                try:
                    await _call(self.io.send, step.text)
                except Exception as e:
                    LOGGER.error(f"Send failed, dropping {step.text!r}: {e}")
            elif isinstance(step, EchoStep):
                try:
                    await _call(self.io.echo, step.text)
                except Exception as e:
                    LOGGER.error(f"Echo failed, dropping {step.text!r}: {e}")
            elif isinstance(step, DelayStep):
                await self._sleep(step.ms / 1000.0)
        if dropped:
            LOGGER.info(f"Dropped {dropped} send(s) while disconnected")

    def spawn(self, steps: Sequence[Step]) -> asyncio.Task | None:
        """Schedule *steps* on the running loop and return the task."""
        if not steps:
            return None
        task = asyncio.get_running_loop().create_task(self.run(list(steps)))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def cancel_all(self) -> int:
        """Cancel every sequence still in flight (disconnect, character switch)."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        self._tasks.clear()
        if tasks:
            LOGGER.info(f"Cancelled {len(tasks)} pending sequence(s)")
        return len(tasks)
