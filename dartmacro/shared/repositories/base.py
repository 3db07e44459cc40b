"""Scope-partitioned in-memory repository backed by the JSON data store.

Records live in two independent maps, one for the active character and one
for the global scope. They are only combined when read (``merged``), with
character records first, so a character switch swaps a single map.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Generic, Protocol, TypeVar

from ..datastore import JsonDataStore
from ..errors import MacroNotFoundError, MacroValidationError
from ..models.base import GLOBAL_KEY, Scope


class _Record(Protocol):
    id: str

    def to_record(self) -> dict[str, Any]: ...


RecordT = TypeVar("RecordT", bound=_Record)

logger = logging.getLogger(__name__)


class ScopedRepository(Generic[RecordT]):
    FILE: ClassVar[str]
    KIND: ClassVar[str]

    def __init__(self, store: JsonDataStore | None = None) -> None:
        self.store = store
        self.character: str | None = None
        self._character: dict[str, RecordT] = {}
        self._global: dict[str, RecordT] = {}
        self._dirty: set[Scope] = set()

    def _from_record(self, record: dict[str, Any]) -> RecordT:
        raise NotImplementedError

    # --- reads ---

    def _scope_map(self, scope: Scope) -> dict[str, RecordT]:
        if scope == "character":
            if self.character is None:
                raise MacroValidationError("No active character for character scope")
            return self._character
        return self._global

    def get(self, record_id: str, scope: Scope) -> RecordT:
        record = self._scope_map(scope).get(record_id)
        if record is None:
            raise MacroNotFoundError(f"{self.KIND} {record_id} not found in {scope} scope")
        return record

    def list_scope(self, scope: Scope) -> list[RecordT]:
        if scope == "character" and self.character is None:
            return []
        return list(self._scope_map(scope).values())

    def merged(self) -> list[RecordT]:
        """Character records first, then global, insertion order inside each."""
        return [*self._character.values(), *self._global.values()]

    @property
    def dirty(self) -> bool:
        """True while some scope has writes that ``flush`` has not persisted."""
        return bool(self._dirty)

    def scope_of(self, record_id: str) -> Scope | None:
        if record_id in self._character:
            return "character"
        if record_id in self._global:
            return "global"
        return None

    # --- writes (mark the scope dirty; ``flush`` persists) ---

    def insert(self, record: RecordT, scope: Scope) -> RecordT:
        self._scope_map(scope)[record.id] = record
        self._dirty.add(scope)
        return record

    def replace(self, record: RecordT, scope: Scope) -> RecordT:
        target = self._scope_map(scope)
        if record.id not in target:
            raise MacroNotFoundError(f"{self.KIND} {record.id} not found in {scope} scope")
        target[record.id] = record
        self._dirty.add(scope)
        return record

    def remove(self, record_id: str, scope: Scope) -> bool:
        target = self._scope_map(scope)
        if target.pop(record_id, None) is None:
            return False
        self._dirty.add(scope)
        return True

    # --- persistence ---

    def _scope_key(self, scope: Scope) -> str | None:
        if scope == "global":
            return GLOBAL_KEY
        return self.character.lower() if self.character else None

    async def _load_map(self, key: str) -> dict[str, RecordT]:
        if self.store is None:
            return {}
        saved = await self.store.get(self.FILE, key) or {}
        records: dict[str, RecordT] = {}
        for record_id, raw in saved.items():
            try:
                records[record_id] = self._from_record(raw)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed {self.KIND} {record_id}: {e}")
        return records

    async def load_global(self) -> None:
        self._global = await self._load_map(GLOBAL_KEY)
        logger.debug(f"Loaded {len(self._global)} global {self.KIND} records")

    async def switch_character(self, character: str | None) -> None:
        """Flush pending character writes, then swap in *character*'s map."""
        await self.flush()
        self.character = character
        if character is None:
            self._character = {}
            return
        self._character = await self._load_map(character.lower())
        logger.debug(f"Loaded {len(self._character)} {self.KIND} records for {character}")

    async def flush(self) -> None:
        if self.store is None:
            self._dirty.clear()
            return
        for scope in list(self._dirty):
            key = self._scope_key(scope)
            self._dirty.discard(scope)
            if key is None:
                continue
            records = self._character if scope == "character" else self._global
            await self.store.set(
                self.FILE, key, {rid: rec.to_record() for rid, rec in records.items()}
            )
            await self.store.save(self.FILE)
