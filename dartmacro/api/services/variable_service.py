"""Variable service: edit-boundary rules for variables."""

from __future__ import annotations

from typing import Any

from ...shared.errors import MacroValidationError
from ...shared.models.base import Scope
from ...shared.models.variable import Variable
from ...shared.validation import validate_variable_name
from .base import MacroService


class VariableService(MacroService[Variable]):
    KIND = "variables"
    COPY_FIELD = "name"

    def _build(self, fields: dict[str, Any]) -> Variable:
        return Variable(**fields)

    def _validate(self, fields: dict[str, Any]) -> dict[str, Any]:
        fields = super()._validate(fields)
        fields["name"] = validate_variable_name(fields.get("name", ""))
        fields["value"] = str(fields.get("value") or "")
        return fields

    def _check_unique(self, fields: dict[str, Any], scope: Scope, exclude_id: str | None) -> None:
        existing = self.session.variables.find_by_name(fields["name"], scope)
        if existing is not None and existing.id != exclude_id:
            raise MacroValidationError(f"Variable {fields['name']} already exists in {scope} scope")
