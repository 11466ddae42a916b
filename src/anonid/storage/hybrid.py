# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Hybrid Identity Store.

Replicates identities across several stores. Saves go to every member
concurrently; loads are served by the first member, in priority order,
that returns data.
"""

import asyncio
import logging
from typing import Any, Sequence

from anonid.exceptions import ConfigurationError
from anonid.identity.models import Identity

from .provider import IdentityStore

logger = logging.getLogger(__name__)


class HybridIdentityStore(IdentityStore):
    """
    Fan-out over member stores.

    ``save`` is not transactional: if one member fails the call raises,
    and members that already succeeded keep the new data.

    Args:
        members: Stores in load priority order.
    """

    backend = "hybrid"

    def __init__(self, members: Sequence[IdentityStore], **kwargs: Any):
        super().__init__(**kwargs)
        if not members:
            raise ConfigurationError("Hybrid storage needs at least one member")
        self.members = list(members)

    async def save(self, identities: Sequence[Identity]) -> None:
        with self._observe("save"):
            await self._fan_out("save", [member.save(identities) for member in self.members])

    async def load(self) -> list[Identity]:
        with self._observe("load"):
            for member in self.members:
                try:
                    identities = await member.load()
                except Exception:
                    logger.warning(
                        "Skipping %s store during hybrid load", member.backend, exc_info=True
                    )
                    continue
                if identities:
                    return identities
            return []

    async def clear(self) -> None:
        with self._observe("clear"):
            await self._fan_out("clear", [member.clear() for member in self.members])

    async def _fan_out(self, operation: str, calls: list) -> None:
        # every member runs to completion; the first failure is re-raised
        outcomes = await asyncio.gather(*calls, return_exceptions=True)
        failures = [
            (member, outcome)
            for member, outcome in zip(self.members, outcomes)
            if isinstance(outcome, BaseException)
        ]
        for member, error in failures:
            logger.error(
                "Hybrid %s failed on %s store: %s", operation, member.backend, error
            )
        if failures:
            raise failures[0][1]

    async def get_storage_info(self) -> dict[str, Any]:
        info: dict[str, Any] = {}
        for member_info in await asyncio.gather(
            *(member.get_storage_info() for member in self.members)
        ):
            info.update(member_info)
        return info
