"""
Session management module.

SessionHandler stores session records in a Cache with sliding expiration,
Session is the per-request get/set/delete facade on top of it.
"""

from session.config import SessionConfig
from session.handler import SessionHandler, SESSION_KEY_PREFIX
from session.facade import Session, generate_session_id, is_valid_session_id

__all__ = [
    "SessionConfig",
    "SessionHandler",
    "SESSION_KEY_PREFIX",
    "Session",
    "generate_session_id",
    "is_valid_session_id",
]
