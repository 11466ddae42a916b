"""Tests for building identity stores from configuration."""

import pytest

from anonid.exceptions import ConfigurationError
from anonid.storage import (
    ContentAddressedIdentityStore,
    DatabaseIdentityStore,
    FileKeyValueStore,
    HybridIdentityStore,
    KeyValueIdentityStore,
    LedgerIdentityStore,
    MemoryIdentityStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
    StorageConfig,
    StorageScope,
    create_storage,
)


class TestCreateStorage:
    def test_default_is_memory(self):
        assert isinstance(create_storage(StorageConfig()), MemoryIdentityStore)

    def test_local(self, tmp_path):
        store = create_storage({"type": "local", "path": str(tmp_path / "ids.json")})
        assert isinstance(store, KeyValueIdentityStore)
        assert isinstance(store.kv, FileKeyValueStore)
        assert store.scope is StorageScope.PERSISTENT

    def test_session(self):
        store = create_storage({"type": "session"})
        assert store.scope is StorageScope.SESSION
        assert isinstance(store.kv, MemoryKeyValueStore)

    def test_redis(self):
        store = create_storage({"type": "redis", "redis_url": "redis://localhost:6379/0"})
        assert isinstance(store.kv, RedisKeyValueStore)

    def test_redis_requires_url(self):
        with pytest.raises(ConfigurationError, match="redis_url"):
            create_storage({"type": "redis"})

    @pytest.mark.asyncio
    async def test_database(self):
        store = create_storage({"type": "database"})
        assert isinstance(store, DatabaseIdentityStore)
        await store.dispose()

    @pytest.mark.asyncio
    async def test_ipfs(self):
        store = create_storage({"type": "ipfs", "gateway": "https://gw.example/ipfs/"})
        assert isinstance(store, ContentAddressedIdentityStore)
        assert (await store.get_storage_info())["gateway"] == "https://gw.example/ipfs/"

    def test_ipfs_file_backed(self, tmp_path):
        store = create_storage({"type": "ipfs", "path": str(tmp_path / "ipfs.json")})
        assert isinstance(store.kv, FileKeyValueStore)

    def test_blockchain(self):
        store = create_storage(
            {"type": "blockchain", "network": "polygon", "contract_address": "0xabc"}
        )
        assert isinstance(store, LedgerIdentityStore)
        assert store.network == "polygon"
        assert store.contract_address == "0xabc"

    def test_blockchain_requires_network(self):
        with pytest.raises(ConfigurationError, match="network"):
            create_storage({"type": "blockchain"})

    def test_blockchain_rejects_unknown_network(self):
        with pytest.raises(ConfigurationError):
            create_storage({"type": "blockchain", "network": "dogecoin"})

    def test_hybrid(self):
        store = create_storage(
            {
                "type": "hybrid",
                "members": [{"type": "memory"}, {"type": "ipfs"}],
            }
        )
        assert isinstance(store, HybridIdentityStore)
        assert [type(m) for m in store.members] == [
            MemoryIdentityStore,
            ContentAddressedIdentityStore,
        ]

    def test_hybrid_requires_members(self):
        with pytest.raises(ConfigurationError, match="members"):
            create_storage({"type": "hybrid"})

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError):
            create_storage({"type": "floppy"})

    @pytest.mark.asyncio
    async def test_hybrid_round_trip(self, identity, tmp_path):
        store = create_storage(
            {
                "type": "hybrid",
                "members": [
                    {"type": "local", "path": str(tmp_path / "ids.json")},
                    {"type": "session"},
                ],
            }
        )
        await store.save([identity])
        assert await store.load() == [identity]
        assert await create_storage({"type": "session"}).load() == [identity]
