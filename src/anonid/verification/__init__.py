"""
Verification Engine

Relying-party side of the trust engine:
- Four-factor credential verification (signature, expiry, trust, revocation)
- Concurrent batch verification
- Presentation verification and presentation requests
- Bounded per-verifier history
"""

from .models import (
    VerificationMetadata,
    VerificationResult,
    BatchVerificationResult,
    PresentationRequest,
    PresentationRequestConfig,
)
from .history import VerificationHistory
from .policy import (
    TrustPolicy,
    RevocationPolicy,
    AllowAllTrustPolicy,
    AllowlistTrustPolicy,
    NoRevocationPolicy,
    RevocationListPolicy,
)
from .revocation import RevocationList, RevocationEntry
from .engine import VerificationEngine

__all__ = [
    "VerificationMetadata",
    "VerificationResult",
    "BatchVerificationResult",
    "PresentationRequest",
    "PresentationRequestConfig",
    "VerificationHistory",
    "TrustPolicy",
    "RevocationPolicy",
    "AllowAllTrustPolicy",
    "AllowlistTrustPolicy",
    "NoRevocationPolicy",
    "RevocationListPolicy",
    "RevocationList",
    "RevocationEntry",
    "VerificationEngine",
]
