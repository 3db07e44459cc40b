"""Repository for timers."""

from __future__ import annotations

from typing import Any

from ..models.timer import Timer
from .base import ScopedRepository


class TimerRepository(ScopedRepository[Timer]):
    FILE = "timers.json"
    KIND = "timer"

    def _from_record(self, record: dict[str, Any]) -> Timer:
        return Timer.from_record(record)

    def list_schedulable(self) -> list[Timer]:
        """Enabled timers with a positive interval."""
        return [timer for timer in self.merged() if timer.schedulable]
