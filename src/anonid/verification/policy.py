# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Trust and Revocation Policies

Pluggable checks consulted by the verification engine. Both hooks are
coroutines so a deployment can back them with a registry lookup over
the network; the reference policies answer immediately.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from anonid.identity.models import Credential

from .revocation import RevocationList


class TrustPolicy(ABC):
    """Decides whether an issuer is trusted."""

    @abstractmethod
    async def is_trusted(self, issuer: str) -> bool:
        """Return True if credentials from *issuer* may be accepted."""


class RevocationPolicy(ABC):
    """Decides whether a credential has been revoked."""

    @abstractmethod
    async def is_revoked(self, credential: Credential) -> bool:
        """Return True if *credential* must no longer be accepted."""


class AllowAllTrustPolicy(TrustPolicy):
    """Reference policy: every issuer is trusted."""

    async def is_trusted(self, issuer: str) -> bool:
        return True


class AllowlistTrustPolicy(TrustPolicy):
    """Trusts only issuers on an explicit allowlist."""

    def __init__(self, trusted_issuers: Optional[Iterable[str]] = None):
        self.trusted_issuers = set(trusted_issuers or [])

    def add_trusted_issuer(self, issuer: str) -> None:
        self.trusted_issuers.add(issuer)

    def remove_trusted_issuer(self, issuer: str) -> None:
        self.trusted_issuers.discard(issuer)

    async def is_trusted(self, issuer: str) -> bool:
        return issuer in self.trusted_issuers


class NoRevocationPolicy(RevocationPolicy):
    """Reference policy: nothing is ever revoked."""

    async def is_revoked(self, credential: Credential) -> bool:
        return False


class RevocationListPolicy(RevocationPolicy):
    """Checks credentials against a :class:`RevocationList`.

    Derived (selectively disclosed) credentials are checked under the id
    of the credential they were derived from.
    """

    def __init__(self, revocation_list: Optional[RevocationList] = None):
        self.revocation_list = revocation_list or RevocationList()

    async def is_revoked(self, credential: Credential) -> bool:
        credential_id = credential.id
        if credential.disclosure_meta is not None:
            credential_id = credential.disclosure_meta.original_credential_id
        return self.revocation_list.is_revoked(credential_id)
