# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Verification Records

Results produced by the verification engine and the presentation
requests a relying party hands to holders.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from anonid.constants import DEFAULT_REQUEST_MINUTES
from anonid.identity.models import Record, Timestamp, utc_now


class VerificationMetadata(Record):
    """Outcome of each independent check."""

    signature_valid: bool = False
    not_expired: bool = False
    issuer_trusted: bool = False
    revocation_checked: bool = False

    @property
    def all_passed(self) -> bool:
        return (
            self.signature_valid
            and self.not_expired
            and self.issuer_trusted
            and self.revocation_checked
        )


class VerificationResult(Record):
    """Result of verifying one credential or presentation."""

    is_valid: bool
    verified_at: Timestamp = Field(default_factory=utc_now)
    verifier_id: str
    verifier_name: str
    credential_id: str
    issuer: str
    subject: str
    metadata: VerificationMetadata = Field(default_factory=VerificationMetadata)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


OverallResult = Literal["valid", "invalid", "partial"]


class BatchVerificationResult(Record):
    """Aggregate of a batch verification; ``results`` follow input order."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    overall_result: OverallResult
    total_credentials: int
    valid_credentials: int
    invalid_credentials: int
    results: list[VerificationResult] = Field(default_factory=list)
    processed_at: Timestamp = Field(default_factory=utc_now)
    processing_time_ms: float = 0.0

    @staticmethod
    def classify(valid: int, total: int) -> OverallResult:
        if valid == total:
            return "valid"
        if valid == 0:
            return "invalid"
        return "partial"


RequestStatus = Literal["pending", "approved", "denied", "expired"]


class PresentationRequestConfig(BaseModel):
    """What a relying party asks a holder to present."""

    verifier_id: str
    verifier_name: str
    purpose: str
    presentation_type: Literal["single", "batch"] = "single"
    requested_attributes: list[str] = Field(default_factory=list)
    expires_in: int = Field(default=DEFAULT_REQUEST_MINUTES, ge=1, description="Minutes")

    @field_validator("verifier_id", "verifier_name", "purpose")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class PresentationRequest(Record):
    """A pending request for a holder to present attributes."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    requester_id: str
    requester_name: str
    requested_attributes: list[str] = Field(default_factory=list)
    purpose: str
    expires_at: Timestamp
    created_at: Timestamp = Field(default_factory=utc_now)
    status: RequestStatus = "pending"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) > self.expires_at
