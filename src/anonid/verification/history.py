# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Verification History

Bounded, per-verifier audit trail of verification results.
"""

import threading
from collections import deque

from anonid.constants import HISTORY_LIMIT

from .models import VerificationResult


class VerificationHistory:
    """Per-verifier FIFO buffers of verification results.

    Each verifier keeps at most ``limit`` entries; once full, the oldest
    entry is evicted. Entries are never reordered.

    Args:
        limit: Maximum entries retained per verifier.
    """

    def __init__(self, limit: int = HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError(f"limit must be positive, got: {limit}")
        self._limit = limit
        self._buffers: dict[str, deque[VerificationResult]] = {}
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    def record(self, verifier_id: str, result: VerificationResult) -> None:
        """Append *result* to the buffer of *verifier_id*."""
        with self._lock:
            buffer = self._buffers.get(verifier_id)
            if buffer is None:
                buffer = deque(maxlen=self._limit)
                self._buffers[verifier_id] = buffer
            buffer.append(result)

    def get(self, verifier_id: str) -> list[VerificationResult]:
        """Oldest-first copy of the buffer; empty for unknown verifiers."""
        with self._lock:
            return list(self._buffers.get(verifier_id, ()))

    def clear(self, verifier_id: str) -> None:
        with self._lock:
            self._buffers.pop(verifier_id, None)

    def verifiers(self) -> list[str]:
        with self._lock:
            return list(self._buffers)
