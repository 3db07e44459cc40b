"""JSON file data store.

One file per record kind (``aliases.json``, ``triggers.json`` ...). Each file
maps a scope key (``"global"`` or a lowercased character name) to a plain
``{id: record}`` map. File IO runs in a worker thread so the event loop keeps
processing game output while a save is in flight.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonDataStore:
    def __init__(self, data_dir: Path | str) -> None:
        self.data_dir = Path(data_dir).expanduser()
        self._files: dict[str, dict[str, Any]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _get_lock(self, file: str) -> asyncio.Lock:
        if file not in self._locks:
            self._locks[file] = asyncio.Lock()
        return self._locks[file]

    # --- sync helpers (run in a thread) ---

    def _read_file(self, file: str) -> dict[str, Any]:
        path = self.data_dir / file
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {path}: {type(e).__name__}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {path}: top level is not an object")
            return {}
        return data

    def _write_file(self, file: str, data: dict[str, Any]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.data_dir / file
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, path)

    # --- async API ---

    async def _ensure_loaded(self, file: str) -> dict[str, Any]:
        if file not in self._files:
            self._files[file] = await asyncio.to_thread(self._read_file, file)
        return self._files[file]

    async def get(self, file: str, key: str) -> Any | None:
        data = await self._ensure_loaded(file)
        return data.get(key)

    async def set(self, file: str, key: str, value: Any) -> None:
        data = await self._ensure_loaded(file)
        data[key] = value

    async def save(self, file: str) -> None:
        async with self._get_lock(file):
            data = await self._ensure_loaded(file)
            snapshot = json.loads(json.dumps(data))
            await asyncio.to_thread(self._write_file, file, snapshot)
            logger.debug(f"Saved {file}")
