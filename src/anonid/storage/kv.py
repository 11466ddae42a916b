# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Key-Value Stores.

String key-value primitives underneath the single-blob identity stores:
in-process memory, a JSON document on disk, and Redis.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Optional, Union

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from anonid.exceptions import CorruptStorageError, StorageUnavailableError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Async string key-value store."""

    name: str = "abstract"

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get value by key, or None if absent."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Set value."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete key. Returns True if it existed."""
        pass

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None


class MemoryKeyValueStore(KeyValueStore):
    """
    In-memory key-value store.

    Instances are private unless obtained through :meth:`shared`, which
    hands out stores backed by one process-wide namespace per name.
    """

    name = "memory"

    _namespaces: ClassVar[dict[str, dict[str, str]]] = {}
    _namespaces_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, data: Optional[dict[str, str]] = None):
        self._data = data if data is not None else {}

    @classmethod
    def shared(cls, namespace: str) -> "MemoryKeyValueStore":
        """Store bound to the process-wide *namespace*."""
        with cls._namespaces_lock:
            data = cls._namespaces.setdefault(namespace, {})
        return cls(data)

    @classmethod
    def reset_shared(cls, namespace: Optional[str] = None) -> None:
        """Drop one shared namespace, or all of them."""
        with cls._namespaces_lock:
            if namespace is None:
                for data in cls._namespaces.values():
                    data.clear()
            elif namespace in cls._namespaces:
                cls._namespaces[namespace].clear()

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None


class FileKeyValueStore(KeyValueStore):
    """
    Key-value store persisted as one JSON object on disk.

    The document is re-read on every access, so separate instances (and
    separate processes) pointed at the same path see each other's writes.
    """

    name = "file"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageUnavailableError(f"Cannot read {self.path}: {e}") from e
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStorageError(f"{self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise CorruptStorageError(f"{self.path} does not hold a JSON object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            raise StorageUnavailableError(f"Cannot write {self.path}: {e}") from e
        logger.debug("Wrote %d keys to %s", len(data), self.path)

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._read().get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            data = self._read()
            if key not in data:
                return False
            del data[key]
            self._write(data)
            return True


class RedisKeyValueStore(KeyValueStore):
    """
    Redis-backed key-value store.

    Args:
        client: A ``redis.asyncio`` client created with ``decode_responses=True``.
        prefix: Prepended to every key.
    """

    name = "redis"

    def __init__(self, client: aioredis.Redis, prefix: str = ""):
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "") -> "RedisKeyValueStore":
        return cls(aioredis.from_url(url, decode_responses=True), prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._client.get(self._key(key))
        except RedisError as e:
            raise StorageUnavailableError(f"Redis GET {key} failed: {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self._client.set(self._key(key), value)
        except RedisError as e:
            raise StorageUnavailableError(f"Redis SET {key} failed: {e}") from e

    async def delete(self, key: str) -> bool:
        try:
            return await self._client.delete(self._key(key)) > 0
        except RedisError as e:
            raise StorageUnavailableError(f"Redis DEL {key} failed: {e}") from e

    async def exists(self, key: str) -> bool:
        try:
            return await self._client.exists(self._key(key)) > 0
        except RedisError as e:
            raise StorageUnavailableError(f"Redis EXISTS {key} failed: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()
