"""Repository for triggers."""

from __future__ import annotations

from typing import Any

from ..models.trigger import Trigger
from .base import ScopedRepository


class TriggerRepository(ScopedRepository[Trigger]):
    FILE = "triggers.json"
    KIND = "trigger"

    def _from_record(self, record: dict[str, Any]) -> Trigger:
        return Trigger.from_record(record)

    def list_enabled(self) -> list[Trigger]:
        return [trigger for trigger in self.merged() if trigger.enabled]
