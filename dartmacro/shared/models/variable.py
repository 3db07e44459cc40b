"""Variable model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .base import format_timestamp, parse_timestamp


@dataclass
class Variable:
    """User-defined value substituted for ``$name`` in macro bodies."""

    id: str
    name: str
    value: str
    enabled: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = field(default=None, compare=False)

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "value": self.value,
            "enabled": self.enabled,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Variable:
        return cls(
            id=record["id"],
            name=record.get("name", ""),
            value=str(record.get("value", "")),
            enabled=record.get("enabled", True),
            created_at=parse_timestamp(record.get("createdAt")),
            updated_at=parse_timestamp(record.get("updatedAt")),
        )
