# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
In-Memory Identity Store.

Simple in-memory implementation for development and testing.
"""

from typing import Any, Sequence

from anonid.identity.models import Identity

from .provider import IdentityStore


class MemoryIdentityStore(IdentityStore):
    """
    In-memory identity store.

    Holds a private list per instance. Data is lost on restart.
    """

    backend = "memory"

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self._identities: list[Identity] = []

    async def save(self, identities: Sequence[Identity]) -> None:
        with self._observe("save"):
            self._identities = list(identities)

    async def load(self) -> list[Identity]:
        with self._observe("load"):
            return list(self._identities)

    async def clear(self) -> None:
        with self._observe("clear"):
            self._identities = []

    async def get_storage_info(self) -> dict[str, Any]:
        return {"backend": self.backend, "count": len(self._identities)}
