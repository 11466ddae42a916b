# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""Build identity stores from :class:`StorageConfig`."""

import logging
from typing import Any, Optional, Union

from pydantic import ValidationError

from anonid.constants import DEFAULT_DATABASE_URL, DEFAULT_IPFS_GATEWAY, DEFAULT_LOCAL_PATH
from anonid.exceptions import ConfigurationError
from anonid.observability.metrics import MetricsCollector

from .content_provider import ContentAddressedIdentityStore, LedgerIdentityStore
from .database_provider import DatabaseIdentityStore
from .hybrid import HybridIdentityStore
from .keyvalue_provider import KeyValueIdentityStore, StorageScope
from .kv import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore, RedisKeyValueStore
from .memory_provider import MemoryIdentityStore
from .provider import IdentityStore, StorageConfig

logger = logging.getLogger(__name__)


def _content_kv(config: StorageConfig) -> KeyValueStore:
    if config.path:
        return FileKeyValueStore(config.path)
    return MemoryKeyValueStore.shared(config.type)


def create_storage(
    config: Union[StorageConfig, dict[str, Any]],
    metrics: Optional[MetricsCollector] = None,
) -> IdentityStore:
    """
    Create an identity store from *config*.

    Raises:
        ConfigurationError: If the type is unknown or a required option
            (``redis_url``, ``network``, ``members``) is missing.
    """
    if not isinstance(config, StorageConfig):
        try:
            config = StorageConfig.model_validate(config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid storage configuration: {e}") from e

    logger.debug("Creating %s storage", config.type)

    if config.type == "memory":
        return MemoryIdentityStore(metrics=metrics)

    if config.type == "local":
        return KeyValueIdentityStore(
            FileKeyValueStore(config.path or DEFAULT_LOCAL_PATH),
            StorageScope.PERSISTENT,
            metrics=metrics,
        )

    if config.type == "session":
        return KeyValueIdentityStore(scope=StorageScope.SESSION, metrics=metrics)

    if config.type == "redis":
        if not config.redis_url:
            raise ConfigurationError("Redis storage requires redis_url")
        return KeyValueIdentityStore(
            RedisKeyValueStore.from_url(config.redis_url),
            StorageScope.PERSISTENT,
            metrics=metrics,
        )

    if config.type == "database":
        return DatabaseIdentityStore(config.database_url or DEFAULT_DATABASE_URL, metrics=metrics)

    if config.type == "ipfs":
        return ContentAddressedIdentityStore(
            config.gateway or DEFAULT_IPFS_GATEWAY,
            kv=_content_kv(config),
            metrics=metrics,
        )

    if config.type == "blockchain":
        if not config.network:
            raise ConfigurationError("Blockchain storage requires network")
        return LedgerIdentityStore(
            config.network,
            kv=_content_kv(config),
            contract_address=config.contract_address,
            wallet_address=config.wallet_address,
            metrics=metrics,
        )

    if config.type == "hybrid":
        if not config.members:
            raise ConfigurationError("Hybrid storage requires members")
        return HybridIdentityStore(
            [create_storage(member, metrics) for member in config.members],
            metrics=metrics,
        )

    raise ConfigurationError(f"Unknown storage type: {config.type}")
