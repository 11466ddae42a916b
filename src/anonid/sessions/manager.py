# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Session Manager

Creates, reads, updates and terminates time-bounded sessions.

Expiry is derived lazily: nothing runs in the background, a session
whose clock has passed ``expires_at`` is flipped to ``expired`` the next
time it is read through :meth:`SessionManager.get_session`.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, Optional

from anonid.constants import DEFAULT_PERMISSION, DEFAULT_SESSION_MINUTES
from anonid.exceptions import InvalidInputError
from anonid.identity.models import utc_now
from anonid.observability.metrics import MetricsCollector

from .models import Session

logger = logging.getLogger(__name__)


class SessionManager:
    """
    In-process session table.

    Unknown session ids never raise: lookups return ``None`` and updates
    return ``False``.

    Args:
        clock: Callable returning the current UTC time.
        metrics: Optional metrics collector.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self._clock = clock or utc_now
        self._metrics = metrics

    def create_session(
        self,
        user_id: str,
        provider_id: str,
        provider_name: str,
        duration_minutes: float = DEFAULT_SESSION_MINUTES,
    ) -> Session:
        """Open an active session lasting *duration_minutes*."""
        if duration_minutes < 0:
            raise InvalidInputError(
                f"duration_minutes must be non-negative, got: {duration_minutes}"
            )
        return self._open(
            user_id,
            provider_id,
            provider_name,
            lifetime=timedelta(minutes=duration_minutes),
        )

    def _open(
        self,
        user_id: str,
        provider_id: str,
        provider_name: str,
        lifetime: timedelta,
        shared_credential_ids: Iterable[str] = (),
        permissions: Iterable[str] = (DEFAULT_PERMISSION,),
        metadata: Optional[dict[str, Any]] = None,
    ) -> Session:
        now = self._clock()
        session = Session(
            user_id=user_id,
            provider_id=provider_id,
            provider_name=provider_name,
            created_at=now,
            expires_at=now + lifetime,
            last_activity_at=now,
            shared_credential_ids=set(shared_credential_ids),
            permissions=set(permissions),
            metadata=dict(metadata or {}),
        )
        with self._lock:
            self._sessions[session.id] = session
        self._count("created")
        logger.info(
            "Created session %s for %s with %s (expires %s)",
            session.id,
            user_id,
            provider_id,
            session.expires_at.isoformat(),
        )
        return _snapshot(session)

    def get_session(self, session_id: str) -> Optional[Session]:
        """Return the session, marking it expired if its time has passed."""
        with self._lock:
            return _snapshot(self._read(session_id))

    def _read(self, session_id: str) -> Optional[Session]:
        # caller holds self._lock
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.is_active and session.has_lapsed(self._clock()):
            session = session.model_copy(update={"status": "expired"})
            self._sessions[session_id] = session
            self._count("expired")
            logger.info("Session %s expired", session_id)
        return session

    def update_session_activity(self, session_id: str) -> bool:
        """Bump ``last_activity_at`` on an active session."""
        with self._lock:
            session = self._read(session_id)
            if session is None or not session.is_active:
                return False
            self._sessions[session_id] = session.model_copy(
                update={"last_activity_at": self._clock()}
            )
            return True

    def terminate_session(self, session_id: str) -> bool:
        """Mark the session terminated regardless of its current status."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            self._sessions[session_id] = session.model_copy(update={"status": "terminated"})
        self._count("terminated")
        logger.info("Terminated session %s", session_id)
        return True

    def get_active_sessions(self) -> list[Session]:
        """Sessions whose stored status is active.

        Does not run the expiry check, so a session nobody has read since
        its deadline passed is still listed.
        """
        with self._lock:
            return [
                _snapshot(session) for session in self._sessions.values() if session.is_active
            ]

    def get_user_sessions(self, user_id: str) -> list[Session]:
        with self._lock:
            return [
                _snapshot(self._read(session.id))
                for session in list(self._sessions.values())
                if session.user_id == user_id
            ]

    def share_credentials(self, session_id: str, credential_ids: Iterable[str]) -> bool:
        """Record credentials shared with the relying party of an active session."""
        return self._update_active(
            session_id,
            lambda session: {
                "shared_credential_ids": session.shared_credential_ids | set(credential_ids)
            },
        )

    def grant_permissions(self, session_id: str, permissions: Iterable[str]) -> bool:
        return self._update_active(
            session_id,
            lambda session: {"permissions": session.permissions | set(permissions)},
        )

    def extend_session(self, session_id: str, additional_minutes: float) -> Optional[Session]:
        """
        Extend an active session by replacing it.

        The current session is terminated and a new one is opened for the
        remaining time plus *additional_minutes*, carrying over shared
        credentials, permissions and metadata.
        """
        if additional_minutes <= 0:
            raise InvalidInputError(
                f"additional_minutes must be positive, got: {additional_minutes}"
            )
        with self._lock:
            session = self._read(session_id)
            if session is None or not session.is_active:
                return None
            self._sessions[session_id] = session.model_copy(update={"status": "terminated"})

        remaining = max(session.expires_at - self._clock(), timedelta(0))
        replacement = self._open(
            session.user_id,
            session.provider_id,
            session.provider_name,
            lifetime=remaining + timedelta(minutes=additional_minutes),
            shared_credential_ids=session.shared_credential_ids,
            permissions=session.permissions,
            metadata={**session.metadata, "extended_from": session.id},
        )
        self._count("extended")
        return replacement

    def _update_active(self, session_id: str, changes: Callable[[Session], dict]) -> bool:
        with self._lock:
            session = self._read(session_id)
            if session is None or not session.is_active:
                return False
            self._sessions[session_id] = session.model_copy(update=changes(session))
            return True

    def _count(self, event: str) -> None:
        if self._metrics:
            self._metrics.record_session_event(event)

    def __len__(self) -> int:
        return len(self._sessions)


def _snapshot(session: Optional[Session]) -> Optional[Session]:
    # sets and metadata stay mutable on a frozen model
    return session.model_copy(deep=True) if session is not None else None
