# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Content-Addressed Identity Stores.

Simulated IPFS and ledger backends. Payloads are stored under an id
derived from their content and a pointer key remembers the latest id.
Clearing forgets the pointer only; earlier payloads stay addressable.
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from anonid.constants import (
    DEFAULT_IPFS_GATEWAY,
    IPFS_CONTENT_PREFIX,
    IPFS_POINTER_KEY,
    LEDGER_CONTENT_PREFIX,
    LEDGER_POINTER_KEY,
    SUPPORTED_NETWORKS,
)
from anonid.exceptions import ConfigurationError, CorruptStorageError
from anonid.identity.models import Identity, utc_now

from .kv import KeyValueStore, MemoryKeyValueStore
from .provider import IdentityStore
from .serialization import dump_identities, load_identities

logger = logging.getLogger(__name__)


def content_hash(payload: str) -> str:
    """IPFS-style address of *payload*: ``Qm`` plus 44 hex digits of SHA-256."""
    return "Qm" + hashlib.sha256(payload.encode("utf-8")).hexdigest()[:44]


def transaction_hash(payload: str, timestamp: datetime) -> str:
    """Ledger-style transaction id over *payload* and the save time."""
    digest = hashlib.sha256(f"{payload}{timestamp.isoformat()}".encode("utf-8"))
    return "0x" + digest.hexdigest()


class ContentAddressedIdentityStore(IdentityStore):
    """
    Simulated IPFS identity store.

    Args:
        gateway: Gateway URL reported in storage info.
        kv: Key-value store holding content and pointer.
    """

    backend = "ipfs"

    def __init__(
        self,
        gateway: str = DEFAULT_IPFS_GATEWAY,
        kv: Optional[KeyValueStore] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.gateway = gateway
        self.kv = kv or MemoryKeyValueStore.shared(self.backend)

    async def save(self, identities: Sequence[Identity]) -> None:
        payload = dump_identities(identities)
        address = content_hash(payload)
        with self._observe("save"):
            await self.kv.set(IPFS_CONTENT_PREFIX + address, payload)
            await self.kv.set(IPFS_POINTER_KEY, address)
        logger.info("Pinned %d identities at %s", len(identities), address)

    async def load(self) -> list[Identity]:
        with self._observe("load"):
            address = await self.kv.get(IPFS_POINTER_KEY)
            if address is None:
                return []
            identities = await self.get_content(address)
            if identities is None:
                raise CorruptStorageError(f"No content stored for {address}")
            return identities

    async def get_content(self, address: str) -> Optional[list[Identity]]:
        """Identities stored under *address*, even if no longer current."""
        payload = await self.kv.get(IPFS_CONTENT_PREFIX + address)
        if payload is None:
            return None
        return load_identities(payload)

    async def clear(self) -> None:
        with self._observe("clear"):
            await self.kv.delete(IPFS_POINTER_KEY)

    async def get_storage_info(self) -> dict[str, Any]:
        return {"hash": await self.kv.get(IPFS_POINTER_KEY), "gateway": self.gateway}


class LedgerIdentityStore(IdentityStore):
    """
    Simulated blockchain identity store.

    Each save writes an envelope tagged with the network under a fresh
    transaction id.

    Args:
        network: One of ``SUPPORTED_NETWORKS``.
        kv: Key-value store holding envelopes and pointer.
        contract_address: Reported in storage info when set.
        wallet_address: Reported in storage info when set.
        clock: Callable returning the current UTC time.
    """

    backend = "blockchain"

    def __init__(
        self,
        network: str,
        kv: Optional[KeyValueStore] = None,
        contract_address: Optional[str] = None,
        wallet_address: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        if network not in SUPPORTED_NETWORKS:
            raise ConfigurationError(
                f"Unsupported network {network!r}; expected one of {', '.join(SUPPORTED_NETWORKS)}"
            )
        self.network = network
        self.contract_address = contract_address
        self.wallet_address = wallet_address
        self.kv = kv or MemoryKeyValueStore.shared(self.backend)
        self._clock = clock or utc_now

    async def save(self, identities: Sequence[Identity]) -> None:
        payload = dump_identities(identities)
        timestamp = self._clock()
        tx_hash = transaction_hash(payload, timestamp)
        envelope = {
            "network": self.network,
            "txHash": tx_hash,
            "timestamp": timestamp.isoformat(),
            "data": payload,
        }
        with self._observe("save"):
            await self.kv.set(LEDGER_CONTENT_PREFIX + tx_hash, json.dumps(envelope))
            await self.kv.set(LEDGER_POINTER_KEY, tx_hash)
        logger.info(
            "Recorded %d identities on %s in %s", len(identities), self.network, tx_hash
        )

    async def load(self) -> list[Identity]:
        with self._observe("load"):
            tx_hash = await self.kv.get(LEDGER_POINTER_KEY)
            if tx_hash is None:
                return []
            identities = await self.get_transaction(tx_hash)
            if identities is None:
                raise CorruptStorageError(f"No transaction stored for {tx_hash}")
            return identities

    async def get_transaction(self, tx_hash: str) -> Optional[list[Identity]]:
        """Identities recorded by *tx_hash* on this network."""
        raw = await self.kv.get(LEDGER_CONTENT_PREFIX + tx_hash)
        if raw is None:
            return None
        try:
            envelope = json.loads(raw)
            network, payload = envelope["network"], envelope["data"]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise CorruptStorageError(f"Malformed transaction {tx_hash}: {e}") from e
        if network != self.network:
            raise CorruptStorageError(
                f"Transaction {tx_hash} belongs to {network}, not {self.network}"
            )
        return load_identities(payload)

    async def clear(self) -> None:
        with self._observe("clear"):
            await self.kv.delete(LEDGER_POINTER_KEY)

    async def get_storage_info(self) -> dict[str, Any]:
        info: dict[str, Any] = {
            "txHash": await self.kv.get(LEDGER_POINTER_KEY),
            "network": self.network,
        }
        if self.contract_address:
            info["contractAddress"] = self.contract_address
        if self.wallet_address:
            info["walletAddress"] = self.wallet_address
        return info
