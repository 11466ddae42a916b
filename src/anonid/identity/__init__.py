"""
Identity & Credential Issuance

Holder identities with:
- Stub-signed credentials over profile attributes
- Copy-on-write credential updates
- Full and selective-disclosure presentations
- Checksummed identity transfer packages
"""

from .models import (
    Identity,
    Credential,
    Proof,
    DisclosureMeta,
    Presentation,
    AttributeSelection,
    RESERVED_SUBJECT_KEY,
)
from .attributes import (
    AttributeField,
    ALL_SCHEMAS,
    BASIC_PROFILE_SCHEMA,
    CONTACT_INFO_SCHEMA,
    validate_attributes,
    extract_attributes,
)
from .issuer import CredentialIssuer, is_identity_reference
from .transfer import (
    TransferPackage,
    TransferInfo,
    create_transfer_package,
    verify_transfer_package,
    open_transfer_package,
)

__all__ = [
    "Identity",
    "Credential",
    "Proof",
    "DisclosureMeta",
    "Presentation",
    "AttributeSelection",
    "RESERVED_SUBJECT_KEY",
    "AttributeField",
    "ALL_SCHEMAS",
    "BASIC_PROFILE_SCHEMA",
    "CONTACT_INFO_SCHEMA",
    "validate_attributes",
    "extract_attributes",
    "CredentialIssuer",
    "is_identity_reference",
    "TransferPackage",
    "TransferInfo",
    "create_transfer_package",
    "verify_transfer_package",
    "open_transfer_package",
]
