"""Tests for bounded verification history."""

import threading

import pytest

from anonid.verification import VerificationHistory, VerificationResult


def _result(n: int) -> VerificationResult:
    return VerificationResult(
        is_valid=True,
        verifier_id="did:key:v",
        verifier_name="V",
        credential_id=f"urn:uuid:{n}",
        issuer="did:key:i",
        subject="did:key:s",
    )


class TestVerificationHistory:
    def test_default_limit(self):
        assert VerificationHistory().limit == 100

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            VerificationHistory(limit=0)

    def test_fifo_eviction(self):
        history = VerificationHistory(limit=3)
        for n in range(5):
            history.record("did:key:v", _result(n))
        assert [r.credential_id for r in history.get("did:key:v")] == [
            "urn:uuid:2",
            "urn:uuid:3",
            "urn:uuid:4",
        ]

    def test_verifiers_isolated(self):
        history = VerificationHistory(limit=2)
        history.record("did:key:a", _result(1))
        history.record("did:key:b", _result(2))
        history.record("did:key:b", _result(3))
        history.record("did:key:b", _result(4))
        assert len(history.get("did:key:a")) == 1
        assert len(history.get("did:key:b")) == 2
        assert sorted(history.verifiers()) == ["did:key:a", "did:key:b"]

    def test_clear(self):
        history = VerificationHistory()
        history.record("did:key:a", _result(1))
        history.clear("did:key:a")
        history.clear("did:key:missing")
        assert history.get("did:key:a") == []

    def test_concurrent_records_bounded(self):
        history = VerificationHistory(limit=50)

        def worker(offset):
            for n in range(100):
                history.record("did:key:v", _result(offset + n))

        threads = [threading.Thread(target=worker, args=(i * 1000,)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(history.get("did:key:v")) == 50
