"""Timer model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .base import DEFAULT_GROUP, format_timestamp, parse_timestamp


@dataclass
class Timer:
    id: str
    name: str
    body: str
    interval_seconds: int
    enabled: bool = True
    group: str = DEFAULT_GROUP
    created_at: datetime | None = None
    updated_at: datetime | None = field(default=None, compare=False)

    @property
    def schedulable(self) -> bool:
        """Disabled timers and non-positive intervals never fire."""
        return self.enabled and self.interval_seconds > 0

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "body": self.body,
            "intervalSeconds": self.interval_seconds,
            "enabled": self.enabled,
            "group": self.group,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Timer:
        return cls(
            id=record["id"],
            name=record.get("name", ""),
            body=record.get("body", ""),
            interval_seconds=int(record.get("intervalSeconds") or 0),
            enabled=record.get("enabled", True),
            group=record.get("group") or DEFAULT_GROUP,
            created_at=parse_timestamp(record.get("createdAt")),
            updated_at=parse_timestamp(record.get("updatedAt")),
        )
