# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Key-Value Identity Store.

Stores the whole identity list as one JSON blob under a fixed key of a
:class:`~anonid.storage.kv.KeyValueStore`.
"""

import logging
from enum import Enum
from typing import Any, Optional, Sequence

from anonid.constants import DEFAULT_LOCAL_PATH, SESSION_NAMESPACE, STORAGE_KEY
from anonid.exceptions import CorruptStorageError
from anonid.identity.models import Identity

from .kv import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from .provider import IdentityStore
from .serialization import dump_identities, load_identities

logger = logging.getLogger(__name__)


class StorageScope(str, Enum):
    """How long stored identities are expected to live."""

    PERSISTENT = "persistent"  # until explicitly cleared
    SESSION = "session"  # until the process ends


class KeyValueIdentityStore(IdentityStore):
    """
    Single-blob identity store.

    Malformed data is an error in persistent scope and is tolerated (with a
    warning) in session scope, where it loads as empty.

    Args:
        kv: Underlying key-value store. Defaults to a file store for
            persistent scope and the shared session namespace otherwise.
        scope: Lifetime of the stored data.
        key: Key holding the blob.
    """

    def __init__(
        self,
        kv: Optional[KeyValueStore] = None,
        scope: StorageScope = StorageScope.PERSISTENT,
        key: str = STORAGE_KEY,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.scope = StorageScope(scope)
        if kv is None:
            if self.scope is StorageScope.PERSISTENT:
                kv = FileKeyValueStore(DEFAULT_LOCAL_PATH)
            else:
                kv = MemoryKeyValueStore.shared(SESSION_NAMESPACE)
        self.kv = kv
        self.key = key

    @property
    def backend(self) -> str:
        return self.kv.name

    async def save(self, identities: Sequence[Identity]) -> None:
        with self._observe("save"):
            await self.kv.set(self.key, dump_identities(identities))
        logger.info("Saved %d identities to %s store", len(identities), self.backend)

    async def load(self) -> list[Identity]:
        with self._observe("load"):
            try:
                raw = await self.kv.get(self.key)
                if raw is None:
                    return []
                return load_identities(raw)
            except CorruptStorageError:
                if self.scope is StorageScope.PERSISTENT:
                    raise
                logger.warning("Discarding malformed session identities under %s", self.key)
                return []

    async def clear(self) -> None:
        with self._observe("clear"):
            await self.kv.delete(self.key)

    async def get_storage_info(self) -> dict[str, Any]:
        return {"backend": self.backend, "scope": self.scope.value, "key": self.key}
