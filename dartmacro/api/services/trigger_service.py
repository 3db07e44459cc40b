"""Trigger service: edit-boundary rules for triggers."""

from __future__ import annotations

from typing import Any

from ...shared.models.trigger import TRIGGER_MATCH_MODES, Trigger
from ...shared.validation import clamp_non_negative, validate_match_mode, validate_pattern
from .base import MacroService


class TriggerService(MacroService[Trigger]):
    KIND = "triggers"
    COPY_FIELD = "pattern"

    def _build(self, fields: dict[str, Any]) -> Trigger:
        return Trigger(**fields)

    def _validate(self, fields: dict[str, Any]) -> dict[str, Any]:
        fields = super()._validate(fields)
        fields["match_mode"] = validate_match_mode(
            fields.get("match_mode", "substring"), TRIGGER_MATCH_MODES
        )
        fields["pattern"] = validate_pattern(fields.get("pattern", ""), fields["match_mode"])
        fields["cooldown_ms"] = clamp_non_negative(fields.get("cooldown_ms"))
        if not fields.get("highlight"):
            fields["highlight"] = None
        fields.setdefault("body", "")
        return fields
