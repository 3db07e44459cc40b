"""Shared CRUD behaviour for the four macro kinds.

Every mutation validates at the edit boundary, bumps ``updated_at`` and
persists the touched scopes before returning.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, ClassVar, Generic, TypeVar

from ...client.session import MacroSession
from ...shared.models.base import (
    Scope,
    canonical_group,
    generate_id,
    next_timestamp,
    utcnow,
)
from ...shared.repositories.base import ScopedRepository
from ...shared.validation import validate_scope

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")

_SYSTEM_FIELDS = ("id", "created_at", "updated_at")


class MacroService(Generic[RecordT]):
    KIND: ClassVar[str]
    # field that gets the "_copy" suffix on duplicate
    COPY_FIELD: ClassVar[str]

    def __init__(self, session: MacroSession) -> None:
        self.session = session

    @property
    def repo(self) -> ScopedRepository:
        return self.session.repositories[self.KIND]

    # --- hooks ---

    def _build(self, fields: dict[str, Any]) -> RecordT:
        raise NotImplementedError

    def _validate(self, fields: dict[str, Any]) -> dict[str, Any]:
        if "group" in fields:
            fields["group"] = canonical_group(fields["group"])
        return fields

    def _check_unique(self, fields: dict[str, Any], scope: Scope, exclude_id: str | None) -> None:
        pass

    async def _after_change(self) -> None:
        await self.repo.flush()

    # --- helpers ---

    def _new(self, fields: dict[str, Any]) -> RecordT:
        now = utcnow()
        return self._build({**fields, "id": generate_id(), "created_at": now, "updated_at": now})

    @staticmethod
    def _fields(record: Any) -> dict[str, Any]:
        return {
            key: value
            for key, value in dataclasses.asdict(record).items()
            if key not in _SYSTEM_FIELDS
        }

    # --- CRUD ---

    def list_records(self) -> list[tuple[Scope, RecordT]]:
        """Merged order: character scope first, then global."""
        return [
            *(("character", record) for record in self.repo.list_scope("character")),
            *(("global", record) for record in self.repo.list_scope("global")),
        ]

    async def create(self, scope: str, fields: dict[str, Any]) -> tuple[Scope, RecordT]:
        scope = validate_scope(scope)
        fields = self._validate(dict(fields))
        self._check_unique(fields, scope, None)
        record = self.repo.insert(self._new(fields), scope)
        await self._after_change()
        logger.info(f"Created {self.repo.KIND} {record.id} in {scope} scope")
        return scope, record

    async def update(
        self, scope: str, record_id: str, changes: dict[str, Any]
    ) -> tuple[Scope, RecordT]:
        """Partial update. A changed ``scope`` is a delete plus a create."""
        scope = validate_scope(scope)
        current = self.repo.get(record_id, scope)
        changes = dict(changes)
        target = validate_scope(changes.pop("scope", None) or scope)
        fields = self._validate({**self._fields(current), **changes})

        if target != scope:
            self._check_unique(fields, target, None)
            record = self.repo.insert(self._new(fields), target)
            self.repo.remove(record_id, scope)
            logger.info(f"Moved {self.repo.KIND} {record_id} to {target} scope as {record.id}")
        else:
            self._check_unique(fields, scope, record_id)
            record = dataclasses.replace(
                current, **fields, updated_at=next_timestamp(current.updated_at)
            )
            self.repo.replace(record, scope)
        await self._after_change()
        return target, record

    async def toggle(self, scope: str, record_id: str) -> tuple[Scope, RecordT]:
        scope = validate_scope(scope)
        current = self.repo.get(record_id, scope)
        record = dataclasses.replace(
            current, enabled=not current.enabled, updated_at=next_timestamp(current.updated_at)
        )
        self.repo.replace(record, scope)
        await self._after_change()
        return scope, record

    async def delete(self, scope: str, record_id: str) -> None:
        scope = validate_scope(scope)
        self.repo.get(record_id, scope)
        self.repo.remove(record_id, scope)
        await self._after_change()
        logger.info(f"Deleted {self.repo.KIND} {record_id} from {scope} scope")

    async def duplicate(self, scope: str, record_id: str) -> tuple[Scope, RecordT]:
        scope = validate_scope(scope)
        fields = self._fields(self.repo.get(record_id, scope))
        fields[self.COPY_FIELD] = f"{fields[self.COPY_FIELD]}_copy"
        return await self.create(scope, fields)
