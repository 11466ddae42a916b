# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""Centralized exception hierarchy for anonid.

All anonid exceptions inherit from AnonIdError, enabling consistent
error handling for callers embedding the trust engine.
"""


class AnonIdError(Exception):
    """Base exception for all anonid errors."""


class InvalidInputError(AnonIdError):
    """Input was rejected before any work was done. Never retried."""


class InvalidIdentityError(InvalidInputError):
    """An identity reference is missing or malformed."""


class NothingSelectedError(InvalidInputError):
    """Selective disclosure was requested without any selected attribute."""


class ConfigurationError(InvalidInputError):
    """A backend or request configuration is missing required fields."""


class StorageError(AnonIdError):
    """Errors related to storage backend operations."""


class CorruptStorageError(StorageError):
    """Stored data exists but could not be decoded."""


class StorageUnavailableError(StorageError):
    """The underlying storage medium failed to complete an operation."""


class TransferIntegrityError(AnonIdError):
    """An identity transfer package failed its checksum."""


__all__ = [
    "AnonIdError",
    "InvalidInputError",
    "InvalidIdentityError",
    "NothingSelectedError",
    "ConfigurationError",
    "StorageError",
    "CorruptStorageError",
    "StorageUnavailableError",
    "TransferIntegrityError",
]
