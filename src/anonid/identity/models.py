# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Identity Data Model

Identities, credentials, proofs and presentations. Records are frozen
pydantic models: updates go through ``model_copy`` so a caller holding
an earlier instance never observes a later mutation.
"""

from __future__ import annotations

import base64
import hashlib
import json
import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from anonid.constants import PROOF_ALGORITHM

RESERVED_SUBJECT_KEY = "id"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


Timestamp = Annotated[datetime, AfterValidator(_as_utc)]


def new_urn() -> str:
    return f"urn:uuid:{uuid.uuid4()}"


def canonical_digest(payload: Any) -> str:
    """SHA-256 hex digest of the canonical JSON form of *payload*."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


class Record(BaseModel):
    """Base for all wire records: camelCase aliases, either spelling accepted."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self) -> dict[str, Any]:
        """JSON-compatible dict using the camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)


class Proof(Record):
    """Proof stub attached to a credential or presentation."""

    algorithm: str = PROOF_ALGORITHM
    created: Timestamp = Field(default_factory=utc_now)
    purpose: str = "assertionMethod"
    verification_key_ref: str = ""
    signature_token: str = ""


class DisclosureMeta(Record):
    """Provenance of an attribute-filtered credential."""

    original_credential_id: str
    disclosed_attribute_names: list[str] = Field(default_factory=list)
    timestamp: Timestamp = Field(default_factory=utc_now)

    @field_validator("disclosed_attribute_names")
    @classmethod
    def _unique_names(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class Credential(Record):
    """
    A claim set about a subject, stub-signed by an issuer.

    ``subject_attributes`` always carries the subject reference under the
    reserved ``id`` key; :attr:`attributes` is the disclosable view
    without it.
    """

    id: str = Field(default_factory=new_urn)
    type: list[str] = Field(
        default_factory=lambda: ["VerifiableCredential", "IdentityCredential"]
    )
    issuer: str
    issuance_date: Timestamp = Field(default_factory=utc_now)
    expiration_date: Optional[Timestamp] = None
    subject_attributes: dict[str, Any]
    proof: Optional[Proof] = None
    disclosure_meta: Optional[DisclosureMeta] = None

    @field_validator("type")
    @classmethod
    def _ordered_unique_labels(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @field_validator("subject_attributes")
    @classmethod
    def _requires_subject(cls, value: dict[str, Any]) -> dict[str, Any]:
        subject = value.get(RESERVED_SUBJECT_KEY)
        if not isinstance(subject, str) or not subject:
            raise ValueError("subject attributes must include the subject id")
        return value

    @property
    def subject(self) -> str:
        return self.subject_attributes[RESERVED_SUBJECT_KEY]

    @property
    def attributes(self) -> dict[str, Any]:
        """Disclosable attributes (subject id excluded)."""
        return {
            key: value
            for key, value in self.subject_attributes.items()
            if key != RESERVED_SUBJECT_KEY
        }

    @property
    def is_derived(self) -> bool:
        return self.disclosure_meta is not None

    def body_digest(self) -> str:
        """Digest over everything except the proof."""
        return canonical_digest(
            self.model_dump(mode="json", by_alias=True, exclude={"proof"})
        )


class Identity(Record):
    """A holder's durable record and the credentials it owns."""

    id: str
    display_name: str
    key_material: bytes = b""
    created_at: Timestamp = Field(default_factory=utc_now)
    last_updated: Timestamp = Field(default_factory=utc_now)
    credentials: list[Credential] = Field(default_factory=list)

    @field_validator("key_material", mode="before")
    @classmethod
    def _decode_key_material(cls, value: Any) -> Any:
        if isinstance(value, str):
            return base64.b64decode(value, validate=True)
        return value

    @field_serializer("key_material", when_used="json")
    def _encode_key_material(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")

    def get_credential(self, credential_id: str) -> Optional[Credential]:
        for credential in self.credentials:
            if credential.id == credential_id:
                return credential
        return None

    def with_credential(self, credential: Credential, updated_at: datetime) -> "Identity":
        """Return a copy with *credential* appended; this instance is unchanged."""
        return self.model_copy(
            update={
                "credentials": [*self.credentials, credential],
                "last_updated": _as_utc(updated_at),
            }
        )


class Presentation(Record):
    """A holder-assembled bundle of (possibly filtered) credentials."""

    id: str = Field(default_factory=new_urn)
    type: list[str] = Field(default_factory=lambda: ["VerifiablePresentation"])
    holder: str
    credentials: list[Credential] = Field(default_factory=list)
    proof: Optional[Proof] = None
    created_at: Timestamp = Field(default_factory=utc_now)

    @property
    def credential_ids(self) -> list[str]:
        return [credential.id for credential in self.credentials]

    def disclosed_attribute_names(self) -> set[str]:
        names: set[str] = set()
        for credential in self.credentials:
            names.update(credential.attributes)
        return names

    def body_digest(self) -> str:
        return canonical_digest(
            self.model_dump(mode="json", by_alias=True, exclude={"proof"})
        )


class AttributeSelection(Record):
    """One attribute of one credential chosen for disclosure."""

    credential_id: str
    attribute_name: str
