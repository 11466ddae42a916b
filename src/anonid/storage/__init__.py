"""
Identity storage backends for anonid.

Provides the abstract store interface, concrete backends and a factory
that builds them from configuration.
"""

from .content_provider import ContentAddressedIdentityStore, LedgerIdentityStore
from .database_provider import DatabaseIdentityStore
from .factory import create_storage
from .hybrid import HybridIdentityStore
from .keyvalue_provider import KeyValueIdentityStore, StorageScope
from .kv import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore, RedisKeyValueStore
from .memory_provider import MemoryIdentityStore
from .provider import IdentityStore, StorageConfig

__all__ = [
    "IdentityStore",
    "StorageConfig",
    "StorageScope",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "FileKeyValueStore",
    "RedisKeyValueStore",
    "MemoryIdentityStore",
    "KeyValueIdentityStore",
    "DatabaseIdentityStore",
    "ContentAddressedIdentityStore",
    "LedgerIdentityStore",
    "HybridIdentityStore",
    "create_storage",
]
