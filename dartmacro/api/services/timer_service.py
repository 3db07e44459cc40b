"""Timer service: edit-boundary rules for timers.

Every change restarts the running timer loops so edits apply immediately.
"""

from __future__ import annotations

from typing import Any

from ...shared.errors import MacroValidationError
from ...shared.models.timer import Timer
from ...shared.validation import clamp_non_negative
from .base import MacroService


class TimerService(MacroService[Timer]):
    KIND = "timers"
    COPY_FIELD = "name"

    def _build(self, fields: dict[str, Any]) -> Timer:
        return Timer(**fields)

    def _validate(self, fields: dict[str, Any]) -> dict[str, Any]:
        fields = super()._validate(fields)
        name = (fields.get("name") or "").strip()
        if not name:
            raise MacroValidationError("Timer name must not be empty")
        fields["name"] = name
        fields["interval_seconds"] = clamp_non_negative(fields.get("interval_seconds"))
        fields.setdefault("body", "")
        return fields

    async def _after_change(self) -> None:
        await super()._after_change()
        self.session.timer_manager.refresh()
