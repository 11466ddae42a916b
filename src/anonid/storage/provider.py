# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Abstract Identity Store Interface.

Defines the contract that all identity storage backends must implement,
and the configuration model consumed by the storage factory.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Literal, Optional, Sequence

from pydantic import BaseModel, Field

from anonid.identity.models import Identity
from anonid.observability.metrics import MetricsCollector

StorageType = Literal[
    "memory",
    "local",
    "session",
    "redis",
    "database",
    "ipfs",
    "blockchain",
    "hybrid",
]


class StorageConfig(BaseModel):
    """Configuration for an identity store."""

    type: StorageType = Field(default="memory", description="Storage backend type")

    # local / ipfs / blockchain
    path: Optional[str] = Field(default=None, description="File for the key-value document")

    # redis
    redis_url: Optional[str] = None

    # database
    database_url: Optional[str] = None

    # ipfs
    gateway: Optional[str] = None

    # blockchain
    network: Optional[str] = None
    contract_address: Optional[str] = None
    wallet_address: Optional[str] = None

    # hybrid, in load priority order
    members: list[StorageConfig] = Field(default_factory=list)


class IdentityStore(ABC):
    """
    Abstract identity store.

    Every backend persists the full list of identities as a unit:
    - ``save`` replaces whatever was stored before
    - ``load`` returns an empty list when nothing was ever written
    - ``clear`` is idempotent

    Backend failures raise :class:`~anonid.exceptions.StorageError`.
    """

    backend: str = "abstract"

    def __init__(self, metrics: Optional[MetricsCollector] = None):
        self.metrics = metrics

    @abstractmethod
    async def save(self, identities: Sequence[Identity]) -> None:
        """Persist *identities*, replacing the previous contents."""
        pass

    @abstractmethod
    async def load(self) -> list[Identity]:
        """Return the stored identities."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Forget the stored identities."""
        pass

    @abstractmethod
    async def get_storage_info(self) -> dict[str, Any]:
        """Backend-specific description of where the data lives."""
        pass

    @contextmanager
    def _observe(self, operation: str) -> Iterator[None]:
        try:
            yield
        except Exception:
            self._count(operation, False)
            raise
        self._count(operation, True)

    def _count(self, operation: str, success: bool) -> None:
        if self.metrics:
            self.metrics.record_storage_operation(self.backend, operation, success)
