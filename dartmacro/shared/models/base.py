"""Common helpers shared by every macro record model."""

from __future__ import annotations

import secrets
import time
from datetime import UTC, datetime, timedelta
from typing import Literal

Scope = Literal["character", "global"]

SCOPES: tuple[Scope, ...] = ("character", "global")
GLOBAL_KEY = "global"
DEFAULT_GROUP = "General"


def generate_id() -> str:
    """Return an opaque id of the form ``<epoch-ms>-<random>``."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(3)}"


def utcnow() -> datetime:
    return datetime.now(UTC)


def next_timestamp(previous: datetime | None) -> datetime:
    """Return ``now`` but never earlier than or equal to *previous*.

    Two mutations inside the same clock tick still get distinct, increasing
    ``updated_at`` values.
    """
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def canonical_group(group: str | None) -> str:
    """Groups are case-insensitive and displayed Capitalized."""
    cleaned = (group or "").strip()
    if not cleaned:
        return DEFAULT_GROUP
    return cleaned[0].upper() + cleaned[1:].lower()


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
