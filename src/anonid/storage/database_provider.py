# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Database Identity Store.

Relational backend on async SQLAlchemy, one row per identity.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Sequence

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from anonid.constants import DEFAULT_DATABASE_URL
from anonid.exceptions import StorageUnavailableError
from anonid.identity.models import Identity, utc_now

from .provider import IdentityStore
from .serialization import dump_identity, load_identity

logger = logging.getLogger(__name__)

metadata = MetaData()

identities_table = Table(
    "identities",
    metadata,
    Column("id", String(255), primary_key=True),
    Column("position", Integer, nullable=False),
    Column("payload", Text, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


class DatabaseIdentityStore(IdentityStore):
    """
    Database identity store.

    Features:
    - Async SQLAlchemy Core
    - Schema created on first use
    - ``save`` replaces all rows inside one transaction

    Requires: sqlalchemy[asyncio] plus an async driver (aiosqlite, asyncpg)
    """

    backend = "database"

    def __init__(
        self,
        url: str = DEFAULT_DATABASE_URL,
        engine: Optional[AsyncEngine] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.url = url
        self._engine = engine or self._create_engine(url)
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    @staticmethod
    def _create_engine(url: str) -> AsyncEngine:
        if url.startswith("sqlite") and ":memory:" in url:
            # every connection must see the same in-memory database
            return create_async_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_async_engine(url, pool_pre_ping=True)

    async def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._schema_lock:
            if not self._schema_ready:
                async with self._engine.begin() as conn:
                    await conn.run_sync(metadata.create_all)
                self._schema_ready = True

    async def save(self, identities: Sequence[Identity]) -> None:
        now = utc_now()
        rows = [
            {
                "id": identity.id,
                "position": position,
                "payload": dump_identity(identity),
                "updated_at": now,
            }
            for position, identity in enumerate(identities)
        ]
        with self._observe("save"):
            try:
                await self._ensure_schema()
                async with self._engine.begin() as conn:
                    await conn.execute(delete(identities_table))
                    if rows:
                        await conn.execute(identities_table.insert(), rows)
            except SQLAlchemyError as e:
                raise StorageUnavailableError(f"Database save failed: {e}") from e
        logger.info("Saved %d identities to database", len(rows))

    async def load(self) -> list[Identity]:
        with self._observe("load"):
            try:
                await self._ensure_schema()
                async with self._engine.connect() as conn:
                    result = await conn.execute(
                        select(identities_table.c.payload).order_by(identities_table.c.position)
                    )
                    payloads = result.scalars().all()
            except SQLAlchemyError as e:
                raise StorageUnavailableError(f"Database load failed: {e}") from e
            return [load_identity(payload) for payload in payloads]

    async def clear(self) -> None:
        with self._observe("clear"):
            try:
                await self._ensure_schema()
                async with self._engine.begin() as conn:
                    await conn.execute(delete(identities_table))
            except SQLAlchemyError as e:
                raise StorageUnavailableError(f"Database clear failed: {e}") from e

    async def get_storage_info(self) -> dict[str, Any]:
        return {
            "backend": self.backend,
            "url": self._engine.url.render_as_string(hide_password=True),
            "table": identities_table.name,
        }

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self._engine.dispose()
