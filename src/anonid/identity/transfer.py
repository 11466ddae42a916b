# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Identity Transfer

Checksummed export packages for moving an identity between wallet apps.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import Field

from anonid.exceptions import TransferIntegrityError

from .models import Identity, Record, Timestamp, canonical_digest, utc_now

TRANSFER_FORMAT_VERSION = "1.0.0"


class TransferInfo(Record):
    transfer_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    source_app: str
    target_app: str


class TransferPackage(Record):
    """Portable identity export with an integrity checksum."""

    version: str = TRANSFER_FORMAT_VERSION
    timestamp: Timestamp = Field(default_factory=utc_now)
    identity: dict[str, Any]
    transfer_info: TransferInfo
    checksum: str = ""

    def compute_checksum(self) -> str:
        """SHA-256 over the canonical package with an empty checksum."""
        body = self.model_dump(mode="json", by_alias=True)
        body["checksum"] = ""
        return canonical_digest(body)


def create_transfer_package(
    identity: Identity,
    source_app: str = "anonid",
    target_app: str = "wallet",
    timestamp: datetime | None = None,
) -> TransferPackage:
    """Export *identity* into a checksummed transfer package."""
    package = TransferPackage(
        timestamp=timestamp or utc_now(),
        identity=identity.to_json_dict(),
        transfer_info=TransferInfo(source_app=source_app, target_app=target_app),
    )
    return package.model_copy(update={"checksum": package.compute_checksum()})


def verify_transfer_package(package: TransferPackage) -> bool:
    return bool(package.checksum) and package.checksum == package.compute_checksum()


def open_transfer_package(package: TransferPackage) -> Identity:
    """Validate the checksum and rebuild the identity.

    Raises:
        TransferIntegrityError: If the package was altered after export.
    """
    if not verify_transfer_package(package):
        raise TransferIntegrityError(
            f"Checksum mismatch for transfer {package.transfer_info.transfer_id}"
        )
    return Identity.model_validate(package.identity)
