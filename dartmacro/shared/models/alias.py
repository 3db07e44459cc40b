"""Alias model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .base import DEFAULT_GROUP, format_timestamp, parse_timestamp

ALIAS_MATCH_MODES = ("exact", "prefix", "regex")


@dataclass
class Alias:
    """Rewrites a typed command before it is sent."""

    id: str
    pattern: str
    match_mode: str  # 'exact' | 'prefix' | 'regex'
    body: str
    enabled: bool = True
    group: str = DEFAULT_GROUP
    created_at: datetime | None = None
    updated_at: datetime | None = field(default=None, compare=False)

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "pattern": self.pattern,
            "matchMode": self.match_mode,
            "body": self.body,
            "enabled": self.enabled,
            "group": self.group,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Alias:
        return cls(
            id=record["id"],
            pattern=record.get("pattern", ""),
            match_mode=record.get("matchMode", "exact"),
            body=record.get("body", ""),
            enabled=record.get("enabled", True),
            group=record.get("group") or DEFAULT_GROUP,
            created_at=parse_timestamp(record.get("createdAt")),
            updated_at=parse_timestamp(record.get("updatedAt")),
        )
