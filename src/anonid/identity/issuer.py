# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Credential Issuer

Mints identities, credentials and presentations, and assembles
selective-disclosure presentations from a subset of attributes.

Proofs are stubs: the signature token is a digest of the signed body
with a recognisable prefix, so a verifier can tell issuer-produced and
holder-produced tokens apart without key material.
"""

from __future__ import annotations

import base64
import logging
import re
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from pydantic_core import to_jsonable_python

from anonid.constants import DEFAULT_ISSUER_ID, HOLDER_TOKEN_PREFIX, ISSUER_TOKEN_PREFIX
from anonid.exceptions import InvalidIdentityError, InvalidInputError, NothingSelectedError
from anonid.observability.metrics import MetricsCollector

from .attributes import extract_attributes, validate_attributes
from .models import (
    RESERVED_SUBJECT_KEY,
    AttributeSelection,
    Credential,
    DisclosureMeta,
    Identity,
    Presentation,
    Proof,
    utc_now,
)

logger = logging.getLogger(__name__)

IDENTITY_REFERENCE = re.compile(r"^did:[a-z0-9]+:[A-Za-z0-9._:%-]+$")

SelectionLike = Union[AttributeSelection, Mapping[str, str], Sequence[str]]


def is_identity_reference(value: Any) -> bool:
    """Check that *value* looks like a ``did:<method>:<id>`` reference."""
    return isinstance(value, str) and bool(IDENTITY_REFERENCE.match(value))


def _key_id(public_key: bytes) -> str:
    # multibase "u" prefix: base64url without padding
    return "u" + base64.urlsafe_b64encode(public_key).decode("ascii").rstrip("=")


class CredentialIssuer:
    """
    Issues credentials and presentations for holder identities.

    All entry points return new records; identities passed in are never
    modified (copy-on-write).

    Args:
        issuer_id: Identity reference recorded as the issuer of every credential.
        clock: Callable returning the current UTC time.
        metrics: Optional metrics collector.
    """

    def __init__(
        self,
        issuer_id: str = DEFAULT_ISSUER_ID,
        clock: Optional[Callable[[], datetime]] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        if not is_identity_reference(issuer_id):
            raise InvalidIdentityError(f"Invalid issuer identity reference: {issuer_id!r}")
        self.issuer_id = issuer_id
        self._clock = clock or utc_now
        self._metrics = metrics

    @property
    def verification_key_ref(self) -> str:
        return f"{self.issuer_id}#keys-1"

    # ==================== IDENTITIES ====================

    async def issue_identity(
        self,
        name: str,
        attributes: Optional[dict[str, Any]] = None,
    ) -> Identity:
        """
        Mint a new identity with an initial credential over *attributes*.

        A fresh Ed25519 keypair is generated; only the public key is kept.

        Raises:
            InvalidInputError: If *name* is blank or a well-known attribute
                has the wrong type.
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError("Identity name must not be empty")
        attributes = dict(attributes or {})
        problems = validate_attributes(attributes)
        if problems:
            raise InvalidInputError("; ".join(problems))

        private_key = ed25519.Ed25519PrivateKey.generate()
        public_key = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        identity_id = f"did:key:{_key_id(public_key)}"

        now = self._clock()
        credential = await self.issue_credential(identity_id, attributes)
        identity = Identity(
            id=identity_id,
            display_name=name.strip(),
            key_material=public_key,
            created_at=now,
            last_updated=now,
            credentials=[credential],
        )
        logger.info("Issued identity %s (%s)", identity.id, identity.display_name)
        return identity

    def convert_legacy_identity(self, record: dict[str, Any]) -> Identity:
        """Convert a pre-DID identity record (``id``, ``name``, ``createdAt``)."""
        legacy_id = record.get("id")
        name = record.get("name")
        if not legacy_id or not name:
            raise InvalidInputError("Legacy identity requires 'id' and 'name'")
        now = self._clock()
        return Identity(
            id=f"did:key:legacy-{legacy_id}",
            display_name=name,
            created_at=record.get("createdAt") or record.get("created_at") or now,
            last_updated=now,
        )

    # ==================== CREDENTIALS ====================

    async def issue_credential(
        self,
        subject_id: str,
        attributes: Optional[dict[str, Any]] = None,
        *,
        credential_type: Optional[str] = None,
        expiration_date: Optional[datetime] = None,
    ) -> Credential:
        """
        Issue a stub-signed credential about *subject_id*.

        An ``id`` entry in *attributes* is ignored; the subject reference
        always comes from *subject_id*. Values are stored in their JSON form,
        so a ``date`` becomes its ISO string.

        Raises:
            InvalidIdentityError: If *subject_id* is not a valid identity reference.
        """
        if not is_identity_reference(subject_id):
            raise InvalidIdentityError(f"Invalid identity reference: {subject_id!r}")

        subject_attributes: dict[str, Any] = {RESERVED_SUBJECT_KEY: subject_id}
        for key, value in (attributes or {}).items():
            if key != RESERVED_SUBJECT_KEY:
                subject_attributes[key] = to_jsonable_python(value)

        labels = ["VerifiableCredential", credential_type or "IdentityCredential"]
        credential = Credential(
            type=labels,
            issuer=self.issuer_id,
            issuance_date=self._clock(),
            expiration_date=expiration_date,
            subject_attributes=subject_attributes,
        )
        credential = self._sign(credential)

        if self._metrics:
            self._metrics.record_credential_issued()
        logger.debug("Issued credential %s for %s", credential.id, subject_id)
        return credential

    async def add_credential(
        self,
        identity: Identity,
        attributes: dict[str, Any],
        **options: Any,
    ) -> Identity:
        """Issue a credential for *identity* and return an updated copy."""
        credential = await self.issue_credential(identity.id, attributes, **options)
        return identity.with_credential(credential, updated_at=self._clock())

    @staticmethod
    def extract_attributes(credentials: Iterable[Credential]) -> dict[str, Any]:
        return extract_attributes(credentials)

    # ==================== PRESENTATIONS ====================

    async def create_presentation(
        self,
        identity: Identity,
        credential_ids: Optional[Sequence[str]] = None,
    ) -> Presentation:
        """
        Bundle credentials of *identity* into a holder-signed presentation.

        With *credential_ids*, the presentation follows their order and
        silently drops ids the identity does not hold.
        """
        if credential_ids is None:
            credentials = list(identity.credentials)
        else:
            credentials = []
            for credential_id in dict.fromkeys(credential_ids):
                credential = identity.get_credential(credential_id)
                if credential is not None:
                    credentials.append(credential)
        return self._seal_presentation(identity, credentials)

    async def create_selective_disclosure_presentation(
        self,
        identity: Identity,
        selections: Iterable[SelectionLike],
    ) -> Presentation:
        """
        Build a presentation disclosing only the selected attributes.

        Each credential with at least one selected attribute becomes a
        derived credential holding the subject id plus those attributes;
        credentials with no selected attribute are left out.

        Raises:
            NothingSelectedError: If *selections* is empty.
        """
        chosen = [self._as_selection(item) for item in selections]
        if not chosen:
            raise NothingSelectedError("Nothing selected: choose at least one attribute to disclose")

        by_credential: dict[str, list[str]] = {}
        for selection in chosen:
            by_credential.setdefault(selection.credential_id, [])
            if selection.attribute_name not in by_credential[selection.credential_id]:
                by_credential[selection.credential_id].append(selection.attribute_name)

        disclosed_at = self._clock()
        derived: list[Credential] = []
        for credential in identity.credentials:
            names = [
                name
                for name in by_credential.get(credential.id, [])
                if name != RESERVED_SUBJECT_KEY and name in credential.subject_attributes
            ]
            if not names:
                continue
            subject_attributes = {RESERVED_SUBJECT_KEY: credential.subject}
            for name in names:
                subject_attributes[name] = credential.subject_attributes[name]
            derived.append(
                credential.model_copy(
                    update={
                        "subject_attributes": subject_attributes,
                        "disclosure_meta": DisclosureMeta(
                            original_credential_id=credential.id,
                            disclosed_attribute_names=names,
                            timestamp=disclosed_at,
                        ),
                    }
                )
            )

        logger.debug(
            "Selective disclosure for %s: %d of %d credentials",
            identity.id,
            len(derived),
            len(identity.credentials),
        )
        return self._seal_presentation(identity, derived)

    # ==================== SIGNING ====================

    def _sign(self, credential: Credential) -> Credential:
        proof = Proof(
            created=credential.issuance_date,
            purpose="assertionMethod",
            verification_key_ref=self.verification_key_ref,
            signature_token=ISSUER_TOKEN_PREFIX + credential.body_digest(),
        )
        return credential.model_copy(update={"proof": proof})

    def _seal_presentation(
        self, identity: Identity, credentials: list[Credential]
    ) -> Presentation:
        presentation = Presentation(
            holder=identity.id,
            credentials=credentials,
            created_at=self._clock(),
        )
        proof = Proof(
            created=presentation.created_at,
            purpose="authentication",
            verification_key_ref=f"{identity.id}#keys-1",
            signature_token=HOLDER_TOKEN_PREFIX + presentation.body_digest(),
        )
        return presentation.model_copy(update={"proof": proof})

    @staticmethod
    def _as_selection(item: SelectionLike) -> AttributeSelection:
        if isinstance(item, AttributeSelection):
            return item
        try:
            if isinstance(item, Mapping):
                return AttributeSelection.model_validate(item)
            credential_id, attribute_name = item
            return AttributeSelection(credential_id=credential_id, attribute_name=attribute_name)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"Invalid attribute selection: {item!r}") from exc
