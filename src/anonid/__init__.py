"""
anonid - Credential & Session Trust Engine

Issue · Verify · Store · Session

anonid issues privacy-preserving identities with stub-signed credentials,
verifies credentials and presentations for relying parties, tracks
time-bounded sessions and persists identities across pluggable backends.

Version: 0.1.0
"""

__version__ = "0.1.0"

# Issuance
from .identity import (
    Identity,
    Credential,
    Proof,
    Presentation,
    AttributeSelection,
    CredentialIssuer,
    extract_attributes,
    create_transfer_package,
    open_transfer_package,
)

# Verification
from .verification import (
    VerificationEngine,
    VerificationResult,
    BatchVerificationResult,
    PresentationRequest,
    PresentationRequestConfig,
    AllowlistTrustPolicy,
    RevocationList,
    RevocationListPolicy,
)

# Sessions
from .sessions import Session, SessionManager

# Storage
from .storage import IdentityStore, StorageConfig, create_storage

from .exceptions import (
    AnonIdError,
    InvalidInputError,
    InvalidIdentityError,
    NothingSelectedError,
    ConfigurationError,
    StorageError,
    CorruptStorageError,
    StorageUnavailableError,
    TransferIntegrityError,
)

__all__ = [
    "__version__",
    # Issuance
    "Identity",
    "Credential",
    "Proof",
    "Presentation",
    "AttributeSelection",
    "CredentialIssuer",
    "extract_attributes",
    "create_transfer_package",
    "open_transfer_package",
    # Verification
    "VerificationEngine",
    "VerificationResult",
    "BatchVerificationResult",
    "PresentationRequest",
    "PresentationRequestConfig",
    "AllowlistTrustPolicy",
    "RevocationList",
    "RevocationListPolicy",
    # Sessions
    "Session",
    "SessionManager",
    # Storage
    "IdentityStore",
    "StorageConfig",
    "create_storage",
    # Errors
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
