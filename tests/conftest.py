"""Shared fixtures for anonid tests."""

from datetime import datetime, timedelta, timezone

import pytest

from anonid.identity import CredentialIssuer
from anonid.storage import MemoryKeyValueStore


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def issuer(clock):
    return CredentialIssuer(clock=clock)


@pytest.fixture
async def identity(issuer):
    return await issuer.issue_identity(
        "Alice",
        {"givenName": "Alice", "familyName": "Smith", "isOver18": True},
    )


@pytest.fixture(autouse=True)
def _reset_shared_memory():
    """Shared key-value namespaces are process-wide; isolate tests."""
    MemoryKeyValueStore.reset_shared()
    yield
    MemoryKeyValueStore.reset_shared()
