"""Repository for aliases."""

from __future__ import annotations

from typing import Any

from ..models.alias import Alias
from .base import ScopedRepository


class AliasRepository(ScopedRepository[Alias]):
    FILE = "aliases.json"
    KIND = "alias"

    def _from_record(self, record: dict[str, Any]) -> Alias:
        return Alias.from_record(record)

    def list_enabled(self) -> list[Alias]:
        """Merged priority order, disabled aliases dropped."""
        return [alias for alias in self.merged() if alias.enabled]
