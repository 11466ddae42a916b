"""
Sessions

Time-bounded authorisations between an identity holder and a relying
party, with lazy expiry.
"""

from .manager import SessionManager
from .models import TERMINAL_STATUSES, Session, SessionStatus

__all__ = [
    "Session",
    "SessionStatus",
    "TERMINAL_STATUSES",
    "SessionManager",
]
