"""
Middleware components for the session service.

Request correlation and the session lifecycle around each request.
"""

from middleware.request_id import RequestIDMiddleware, request_id_var
from middleware.session import SessionMiddleware, get_session, setup_sessions

__all__ = [
    "RequestIDMiddleware",
    "request_id_var",
    "SessionMiddleware",
    "get_session",
    "setup_sessions",
]
