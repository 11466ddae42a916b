# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Credential Revocation List

Revoked credential ids, each optionally temporary. Time comes from the
injected clock, so a temporary revocation lapses on the same timeline the
verification engine uses. Reads never modify the list: a lapsed entry is
simply not counted until it is reinstated or overwritten.

When a path is given the list is written through to a JSON file after
every change and read back on construction.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional, Union

from pydantic import TypeAdapter, ValidationError

from anonid.exceptions import CorruptStorageError, InvalidInputError, StorageUnavailableError
from anonid.identity.models import Record, utc_now

logger = logging.getLogger(__name__)


class RevocationEntry(Record):
    """Why and until when a credential is revoked."""

    credential_id: str
    reason: str
    revoked_at: datetime
    revoked_by: Optional[str] = None
    expires_at: Optional[datetime] = None

    def in_force(self, now: datetime) -> bool:
        return self.expires_at is None or now < self.expires_at


_entries_adapter = TypeAdapter(list[RevocationEntry])


class RevocationList:
    """
    Thread-safe set of revoked credentials.

    Args:
        clock: Callable returning the current UTC time.
        path: Optional JSON file to persist to.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        path: Optional[Union[str, Path]] = None,
    ) -> None:
        self._clock = clock or utc_now
        self.path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._entries: dict[str, RevocationEntry] = {}
        if self.path is not None and self.path.exists():
            self._entries = {entry.credential_id: entry for entry in self._read()}

    def revoke(
        self,
        credential_id: str,
        reason: str,
        revoked_by: Optional[str] = None,
        ttl: Optional[timedelta] = None,
    ) -> RevocationEntry:
        """Revoke *credential_id*, replacing any earlier entry for it.

        With *ttl* the revocation lapses that long after now.
        """
        if ttl is not None and ttl <= timedelta(0):
            raise InvalidInputError(f"ttl must be positive, got: {ttl}")
        now = self._clock()
        entry = RevocationEntry(
            credential_id=credential_id,
            reason=reason,
            revoked_at=now,
            revoked_by=revoked_by,
            expires_at=now + ttl if ttl is not None else None,
        )
        with self._lock:
            self._entries[credential_id] = entry
            self._persist()
        logger.info("Revoked credential %s: %s", credential_id, reason)
        return entry

    def reinstate(self, credential_id: str) -> bool:
        """Drop the entry for *credential_id*. False if there was none."""
        with self._lock:
            if self._entries.pop(credential_id, None) is None:
                return False
            self._persist()
        logger.info("Reinstated credential %s", credential_id)
        return True

    def get_entry(self, credential_id: str) -> Optional[RevocationEntry]:
        """The entry revoking *credential_id* right now, if any."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(credential_id)
        if entry is None or not entry.in_force(now):
            return None
        return entry

    def is_revoked(self, credential_id: str) -> bool:
        return self.get_entry(credential_id) is not None

    def revoked(self) -> list[RevocationEntry]:
        """Entries currently in force, in revocation order."""
        now = self._clock()
        with self._lock:
            return [entry for entry in self._entries.values() if entry.in_force(now)]

    def _read(self) -> list[RevocationEntry]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageUnavailableError(f"Cannot read {self.path}: {e}") from e
        try:
            return _entries_adapter.validate_json(raw)
        except ValidationError as e:
            raise CorruptStorageError(f"{self.path} is not a revocation list: {e}") from e

    def _persist(self) -> None:
        # caller holds self._lock
        if self.path is None:
            return
        data = [entry.to_json_dict() for entry in self._entries.values()]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            raise StorageUnavailableError(f"Cannot write {self.path}: {e}") from e

    def __len__(self) -> int:
        return len(self._entries)
