"""Trigger model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .base import DEFAULT_GROUP, format_timestamp, parse_timestamp

TRIGGER_MATCH_MODES = ("substring", "exact", "regex")


@dataclass
class Trigger:
    """Reacts to a line of game output."""

    id: str
    pattern: str
    match_mode: str  # 'substring' | 'exact' | 'regex'
    body: str
    enabled: bool = True
    group: str = DEFAULT_GROUP
    cooldown_ms: int = 0
    gag: bool = False
    highlight: str | None = None  # ANSI colour code, e.g. "33"
    sound_alert: bool = False
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
            "cooldownMs": self.cooldown_ms,
            "gag": self.gag,
            "highlight": self.highlight,
            "soundAlert": self.sound_alert,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Trigger:
        return cls(
            id=record["id"],
            pattern=record.get("pattern", ""),
            match_mode=record.get("matchMode", "substring"),
            body=record.get("body", ""),
            enabled=record.get("enabled", True),
            group=record.get("group") or DEFAULT_GROUP,
            cooldown_ms=max(0, int(record.get("cooldownMs") or 0)),
            gag=record.get("gag", False),
            highlight=record.get("highlight"),
            sound_alert=record.get("soundAlert", False),
            created_at=parse_timestamp(record.get("createdAt")),
            updated_at=parse_timestamp(record.get("updatedAt")),
        )
