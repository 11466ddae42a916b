# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""Session records."""

import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from anonid.identity.models import Record, Timestamp

SessionStatus = Literal["active", "expired", "terminated"]
TERMINAL_STATUSES = frozenset({"expired", "terminated"})


class Session(Record):
    """A time-bounded authorization grant between a holder and a relying party.

    ``expires_at`` is fixed at creation. Snapshots are immutable; the
    session manager replaces its stored record on every change.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    provider_id: str
    provider_name: str
    created_at: Timestamp
    expires_at: Timestamp
    last_activity_at: Timestamp
    status: SessionStatus = "active"
    shared_credential_ids: set[str] = Field(default_factory=set)
    permissions: set[str] = Field(default_factory=set)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def has_lapsed(self, now: datetime) -> bool:
        """True once the clock has passed ``expires_at``."""
        return now > self.expires_at
