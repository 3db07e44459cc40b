"""Alias service: edit-boundary rules for aliases."""

from __future__ import annotations

from typing import Any

from ...shared.models.alias import ALIAS_MATCH_MODES, Alias
from ...shared.validation import validate_match_mode, validate_pattern
from .base import MacroService


class AliasService(MacroService[Alias]):
    KIND = "aliases"
    COPY_FIELD = "pattern"

    def _build(self, fields: dict[str, Any]) -> Alias:
        return Alias(**fields)

    def _validate(self, fields: dict[str, Any]) -> dict[str, Any]:
        fields = super()._validate(fields)
        fields["match_mode"] = validate_match_mode(
            fields.get("match_mode", "prefix"), ALIAS_MATCH_MODES
        )
        fields["pattern"] = validate_pattern(fields.get("pattern", ""), fields["match_mode"])
        fields.setdefault("body", "")
        return fields
