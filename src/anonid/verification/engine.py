# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Verification Engine

Independently re-checks credentials and presentations on behalf of a
relying party and keeps a bounded history per verifier.

Verification never raises for a bad credential: structural problems and
policy rejections come back as an invalid result, and unexpected faults
in a policy hook are converted the same way.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Sequence, Union

from pydantic import ValidationError

from anonid.constants import HISTORY_LIMIT, HOLDER_TOKEN_PREFIX, ISSUER_TOKEN_PREFIX
from anonid.exceptions import ConfigurationError
from anonid.identity.models import Credential, Presentation, Proof, utc_now
from anonid.observability.metrics import MetricsCollector

from .history import VerificationHistory
from .models import (
    BatchVerificationResult,
    PresentationRequest,
    PresentationRequestConfig,
    VerificationMetadata,
    VerificationResult,
)
from .policy import AllowAllTrustPolicy, NoRevocationPolicy, RevocationPolicy, TrustPolicy

logger = logging.getLogger(__name__)

ISSUER_TOKEN_SHAPE = re.compile(rf"^{re.escape(ISSUER_TOKEN_PREFIX)}[0-9a-f]{{64}}$")
HOLDER_TOKEN_SHAPE = re.compile(rf"^{re.escape(HOLDER_TOKEN_PREFIX)}[0-9a-f]{{64}}$")

INVALID_SIGNATURE = "Invalid signature"
CREDENTIAL_EXPIRED = "Credential has expired"
ISSUER_NOT_TRUSTED = "Issuer not in trusted list"
REVOCATION_UNKNOWN = "Could not verify revocation status"
PRESENTATION_FAILED = "Presentation verification failed"


def _token_matches(proof: Optional[Proof], shape: re.Pattern) -> bool:
    if proof is None or not proof.signature_token:
        return False
    return bool(shape.match(proof.signature_token))


class VerificationEngine:
    """
    Verifies credentials, batches and presentations.

    Checks performed per credential:
    1. Signature (structural proof check)
    2. Expiration
    3. Issuer trust (pluggable policy)
    4. Revocation (pluggable policy)

    Args:
        trust_policy: Issuer trust hook; trusts everyone by default.
        revocation_policy: Revocation hook; revokes nothing by default.
        history_limit: Entries retained per verifier.
        clock: Callable returning the current UTC time.
        metrics: Optional metrics collector.
    """

    def __init__(
        self,
        trust_policy: Optional[TrustPolicy] = None,
        revocation_policy: Optional[RevocationPolicy] = None,
        history_limit: int = HISTORY_LIMIT,
        clock: Optional[Callable[[], datetime]] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.trust_policy = trust_policy or AllowAllTrustPolicy()
        self.revocation_policy = revocation_policy or NoRevocationPolicy()
        self._history = VerificationHistory(limit=history_limit)
        self._clock = clock or utc_now
        self._metrics = metrics

    # ==================== CREDENTIALS ====================

    async def verify_credential(
        self,
        credential: Credential,
        verifier_id: str,
        verifier_name: str,
    ) -> VerificationResult:
        """
        Verify a single credential.

        ``is_valid`` is the AND of the four checks. Signature and expiry
        failures are reported as errors; trust and revocation failures as
        warnings. Exactly one history entry is recorded per call.
        """
        try:
            result = await self._check_credential(credential, verifier_id, verifier_name)
        except Exception as e:
            logger.exception("Verification of credential %s failed", credential.id)
            result = VerificationResult(
                is_valid=False,
                verified_at=self._clock(),
                verifier_id=verifier_id,
                verifier_name=verifier_name,
                credential_id=credential.id,
                issuer=credential.issuer,
                subject=credential.subject,
                metadata=VerificationMetadata(),
                errors=[f"Verification failed: {e}"],
            )

        self._record(verifier_id, result, kind="credential")
        return result

    async def _check_credential(
        self,
        credential: Credential,
        verifier_id: str,
        verifier_name: str,
    ) -> VerificationResult:
        now = self._clock()

        signature_valid = _token_matches(credential.proof, ISSUER_TOKEN_SHAPE)
        not_expired = credential.expiration_date is None or credential.expiration_date > now
        issuer_trusted, revoked = await asyncio.gather(
            self.trust_policy.is_trusted(credential.issuer),
            self.revocation_policy.is_revoked(credential),
        )
        metadata = VerificationMetadata(
            signature_valid=signature_valid,
            not_expired=not_expired,
            issuer_trusted=bool(issuer_trusted),
            revocation_checked=not revoked,
        )

        errors: list[str] = []
        warnings: list[str] = []
        if not metadata.signature_valid:
            errors.append(INVALID_SIGNATURE)
        if not metadata.not_expired:
            errors.append(CREDENTIAL_EXPIRED)
        if not metadata.issuer_trusted:
            warnings.append(ISSUER_NOT_TRUSTED)
        if not metadata.revocation_checked:
            warnings.append(REVOCATION_UNKNOWN)

        return VerificationResult(
            is_valid=metadata.all_passed,
            verified_at=now,
            verifier_id=verifier_id,
            verifier_name=verifier_name,
            credential_id=credential.id,
            issuer=credential.issuer,
            subject=credential.subject,
            metadata=metadata,
            errors=errors,
            warnings=warnings,
        )

    async def verify_credentials_batch(
        self,
        credentials: Sequence[Credential],
        verifier_id: str,
        verifier_name: str,
    ) -> BatchVerificationResult:
        """
        Verify *credentials* concurrently.

        Results keep the input order; every credential also lands in the
        verifier's history.
        """
        started = time.monotonic()
        results = await asyncio.gather(
            *(
                self.verify_credential(credential, verifier_id, verifier_name)
                for credential in credentials
            )
        )
        valid = sum(1 for result in results if result.is_valid)
        total = len(results)
        batch = BatchVerificationResult(
            overall_result=BatchVerificationResult.classify(valid, total),
            total_credentials=total,
            valid_credentials=valid,
            invalid_credentials=total - valid,
            results=list(results),
            processed_at=self._clock(),
            processing_time_ms=(time.monotonic() - started) * 1000,
        )
        logger.debug(
            "Batch %s for %s: %s (%d/%d valid)",
            batch.id,
            verifier_id,
            batch.overall_result,
            valid,
            total,
        )
        return batch

    # ==================== PRESENTATIONS ====================

    async def check_presentation(self, presentation: Presentation) -> bool:
        """Presentation-level check: at least one credential and a holder proof."""
        return bool(presentation.credentials) and _token_matches(
            presentation.proof, HOLDER_TOKEN_SHAPE
        )

    async def verify_presentation(
        self,
        presentation: Presentation,
        verifier_id: str,
        verifier_name: str,
    ) -> VerificationResult:
        """Verify a presentation and record the outcome in history."""
        holder = presentation.holder or "unknown"
        try:
            is_valid = await self.check_presentation(presentation)
            result = VerificationResult(
                is_valid=is_valid,
                verified_at=self._clock(),
                verifier_id=verifier_id,
                verifier_name=verifier_name,
                credential_id=presentation.id,
                issuer=holder,
                subject=holder,
                metadata=VerificationMetadata(
                    signature_valid=is_valid,
                    not_expired=True,
                    issuer_trusted=True,
                    revocation_checked=True,
                ),
                errors=[] if is_valid else [PRESENTATION_FAILED],
            )
        except Exception as e:
            logger.exception("Verification of presentation %s failed", presentation.id)
            result = VerificationResult(
                is_valid=False,
                verified_at=self._clock(),
                verifier_id=verifier_id,
                verifier_name=verifier_name,
                credential_id=presentation.id,
                issuer=holder,
                subject=holder,
                metadata=VerificationMetadata(),
                errors=[f"{PRESENTATION_FAILED}: {e}"],
            )

        self._record(verifier_id, result, kind="presentation")
        return result

    # ==================== REQUESTS ====================

    def create_presentation_request(
        self,
        config: Union[PresentationRequestConfig, dict[str, Any]],
    ) -> PresentationRequest:
        """
        Create a pending presentation request.

        Raises:
            ConfigurationError: If required fields are missing or blank.
        """
        if not isinstance(config, PresentationRequestConfig):
            try:
                config = PresentationRequestConfig.model_validate(config)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid presentation request: {e}") from e

        now = self._clock()
        return PresentationRequest(
            requester_id=config.verifier_id,
            requester_name=config.verifier_name,
            requested_attributes=list(config.requested_attributes),
            purpose=config.purpose,
            created_at=now,
            expires_at=now + timedelta(minutes=config.expires_in),
        )

    @staticmethod
    def evaluate_presentation_request(
        request: PresentationRequest,
        presentation: Presentation,
    ) -> list[str]:
        """Requested attributes the presentation does not disclose."""
        disclosed = presentation.disclosed_attribute_names()
        return [name for name in request.requested_attributes if name not in disclosed]

    # ==================== HISTORY ====================

    def get_verification_history(self, verifier_id: str) -> list[VerificationResult]:
        """Results recorded for *verifier_id*, oldest first."""
        return self._history.get(verifier_id)

    def _record(self, verifier_id: str, result: VerificationResult, kind: str) -> None:
        self._history.record(verifier_id, result)
        if self._metrics:
            self._metrics.record_verification(kind, result.is_valid)
        logger.debug(
            "Verified %s %s for %s: valid=%s",
            kind,
            result.credential_id,
            verifier_id,
            result.is_valid,
        )
