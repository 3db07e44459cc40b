"""Repository for variables.

Besides id-based CRUD this is the Variable Store the executor reads and
writes by name: lookups are case-insensitive, character scope wins over
global, and disabled variables are invisible to expansion.
"""

from __future__ import annotations

from typing import Any

from ..models.base import SCOPES, Scope, generate_id, next_timestamp, utcnow
from ..models.variable import Variable
from ..validation import validate_variable_name
from .base import ScopedRepository


class VariableRepository(ScopedRepository[Variable]):
    FILE = "variables.json"
    KIND = "variable"

    def _from_record(self, record: dict[str, Any]) -> Variable:
        return Variable.from_record(record)

    def find_by_name(self, name: str, scope: Scope) -> Variable | None:
        lowered = name.lower()
        for variable in self.list_scope(scope):
            if variable.name.lower() == lowered:
                return variable
        return None

    def lookup(self, name: str) -> str | None:
        """Value of the first enabled variable called *name* in merged order."""
        lowered = name.lower()
        for variable in self.merged():
            if variable.enabled and variable.name.lower() == lowered:
                return variable.value
        return None

    def set_value(self, name: str, value: str, scope: Scope = "character") -> Variable:
        """Create or update the variable called *name* in *scope*.

        Character scope silently falls back to global when no character is
        active, so ``/var`` keeps working before login.
        """
        name = validate_variable_name(name)
        if scope == "character" and self.character is None:
            scope = "global"

        existing = self.find_by_name(name, scope)
        if existing is not None:
            existing.value = value
            existing.updated_at = next_timestamp(existing.updated_at)
            return self.replace(existing, scope)

        now = utcnow()
        variable = Variable(
            id=generate_id(), name=name, value=value, created_at=now, updated_at=now
        )
        return self.insert(variable, scope)

    def delete_by_name(self, name: str) -> bool:
        """Delete *name* from character scope, else from global scope."""
        for scope in SCOPES:
            variable = self.find_by_name(name, scope)
            if variable is not None:
                return self.remove(variable.id, scope)
        return False

    def visible(self) -> list[tuple[str, str]]:
        """``(name, value)`` pairs that expansion would see, shadowed names dropped."""
        seen: set[str] = set()
        pairs: list[tuple[str, str]] = []
        for variable in self.merged():
            key = variable.name.lower()
            if not variable.enabled or key in seen:
                continue
            seen.add(key)
            pairs.append((variable.name, variable.value))
        return pairs
