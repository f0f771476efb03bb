"""
Asynchronous key-value stores for reading progress.

The engine talks to one store interface; the implementation is chosen
when the store is constructed, never per call:
- MemoryStore: process-local dictionary, for tests and ephemeral hosts
- JSONFileStore: one JSON file, durable across sessions

Implementations raise StoreUnavailable when they cannot read or write.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from focusreader.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


class LoopLock:
    """An asyncio.Lock per event loop.

    Stores outlive event loops, and an asyncio.Lock may only be awaited
    from the loop it first waited on.

    Usage:
        lock = LoopLock()
        async with lock():
            ...
    """

    def __init__(self):
        self._lock: asyncio.Lock | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def __call__(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._lock is None or self._loop is not loop:
            self._lock = asyncio.Lock()
            self._loop = loop
        return self._lock


class KeyValueStore(ABC):
    """Abstract base for persistent key-value stores."""

    name: str = "base"

    @abstractmethod
    async def get(self, keys: Iterable[str]) -> dict[str, Any]:
        """Return the stored values for the keys that exist."""
        pass

    @abstractmethod
    async def set(self, items: dict[str, Any]) -> None:
        """Insert or overwrite every item."""
        pass

    @abstractmethod
    async def remove(self, keys: Iterable[str]) -> None:
        """Delete keys; missing keys are ignored."""
        pass

    @abstractmethod
    async def keys(self) -> list[str]:
        """All stored keys."""
        pass


class MemoryStore(KeyValueStore):
    """Dictionary-backed store. Values are copied in and out."""

    name = "memory"

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, keys: Iterable[str]) -> dict[str, Any]:
        return {k: copy.deepcopy(self._data[k]) for k in keys if k in self._data}

    async def set(self, items: dict[str, Any]) -> None:
        self._data.update(copy.deepcopy(items))

    async def remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    async def keys(self) -> list[str]:
        return list(self._data)


class JSONFileStore(KeyValueStore):
    """
    Store persisted to a single JSON file.

    The file is read once and cached; every write rewrites the file
    through a temporary sibling so a crash never leaves it half-written.
    File access runs in a worker thread to keep the event loop free.

    Example:
        >>> store = JSONFileStore(Path("~/.focusreader/progress.json").expanduser())
        >>> await store.set({"key": {"scroll_top": 640}})
    """

    name = "json_file"

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._data: dict[str, Any] | None = None
        # Every read-modify-write holds this, so overlapping calls apply in order
        self._lock = LoopLock()

    async def get(self, keys: Iterable[str]) -> dict[str, Any]:
        async with self._lock():
            data = await self._load()
            return {k: copy.deepcopy(data[k]) for k in keys if k in data}

    async def set(self, items: dict[str, Any]) -> None:
        async with self._lock():
            data = dict(await self._load())
            data.update(copy.deepcopy(items))
            await self._save(data)

    async def remove(self, keys: Iterable[str]) -> None:
        async with self._lock():
            data = dict(await self._load())
            removed = [data.pop(k) for k in list(keys) if k in data]
            if removed:
                await self._save(data)

    async def keys(self) -> list[str]:
        async with self._lock():
            return list(await self._load())

    async def _load(self) -> dict[str, Any]:
        if self._data is None:
            self._data = await asyncio.to_thread(self._read)
        return self._data

    async def _save(self, data: dict[str, Any]) -> None:
        # Memory only follows a successful write
        await asyncio.to_thread(self._write, data)
        self._data = data

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Discarding unreadable progress file %s: %s", self.path, e)
            return {}
        except OSError as e:
            raise StoreUnavailable(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            logger.warning("Discarding progress file %s: top level is not an object", self.path)
            return {}
        return data

    def _write(self, data: dict[str, Any]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise StoreUnavailable(f"Cannot write {self.path}: {e}") from e
