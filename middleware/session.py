"""
Session middleware for FastAPI/Starlette.

Drives the session lifecycle around each request: the session id is read
from the session cookie, a Session is placed on request.state.session, and
once the route has produced its response the session is closed (written
back if it changed) and the cookie is refreshed or removed.

Sessions are started lazily, so requests that never touch the session do
not hit the cache and do not receive a cookie.
"""

import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from config.settings import Settings
from errors.exceptions import AppException
from errors.handlers import handle_app_exception
from session.facade import Session
from session.handler import SessionHandler

logger = logging.getLogger(__name__)


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Middleware that attaches a Session to every request.

    Cookie attributes mirror the usual session cookie settings: the cookie
    lives as long as a session record (max_lifetime_seconds), is HttpOnly
    by default and is scoped to cookie_path.
    """

    def __init__(
        self,
        app: ASGIApp,
        handler: SessionHandler,
        cookie_path: str = "/",
        cookie_secure: bool = False,
        cookie_httponly: bool = True,
        cookie_samesite: str = "lax",
    ):
        super().__init__(app)
        self.handler = handler
        self.cookie_path = cookie_path
        self.cookie_secure = cookie_secure
        self.cookie_httponly = cookie_httponly
        self.cookie_samesite = cookie_samesite

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        cookie_name = self.handler.config.cookie_name
        requested_id = request.cookies.get(cookie_name)

        session = Session(self.handler, session_id=requested_id)
        request.state.session = session

        response = await call_next(request)

        try:
            await self._finalize(session, requested_id, response)
        except AppException as exc:
            return await handle_app_exception(request, exc)

        return response

    async def _finalize(self, session: Session, requested_id: Optional[str], response: Response) -> None:
        cookie_name = session.cookie_name

        if session.is_destroyed and session.session_id is None:
            response.delete_cookie(
                cookie_name,
                path=self.cookie_path,
                secure=self.cookie_secure,
                httponly=self.cookie_httponly,
                samesite=self.cookie_samesite,
            )
            self._log_event("session_destroyed", requested_id)
            return

        if session.session_id is None:
            return

        if session.is_started:
            await session.close()

        response.set_cookie(
            cookie_name,
            session.session_id,
            max_age=self.handler.config.max_lifetime_seconds,
            path=self.cookie_path,
            secure=self.cookie_secure,
            httponly=self.cookie_httponly,
            samesite=self.cookie_samesite,
        )

        if session.session_id != requested_id:
            self._log_event(
                "session_issued",
                session.session_id,
                {"replaced_cookie": requested_id is not None},
            )

    @staticmethod
    def _log_event(event_type: str, session_id, details=None) -> None:
        from telemetry.service import get_telemetry_service

        telemetry = get_telemetry_service()
        if telemetry:
            telemetry.log_session_event(event_type, session_id, details)
        else:
            logger.debug("Session event: %s", event_type)


def get_session(request: Request) -> Session:
    """
    FastAPI dependency returning the current request's Session.

    Example:
        @app.get("/cart")
        async def cart(session: Session = Depends(get_session)):
            return {"items": await session.get("cart", [])}
    """
    session = getattr(request.state, "session", None)
    if session is None:
        raise RuntimeError("SessionMiddleware is not installed on this application")
    return session


def setup_sessions(app: FastAPI, handler: SessionHandler, settings: Settings) -> None:
    """
    Add SessionMiddleware to the application with cookie settings.

    Args:
        app: The FastAPI application instance
        handler: Session storage handler shared by all requests
        settings: Application settings providing the cookie attributes
    """
    app.add_middleware(
        SessionMiddleware,
        handler=handler,
        cookie_path=settings.session_cookie_path,
        cookie_secure=settings.session_cookie_secure,
        cookie_httponly=settings.session_cookie_httponly,
        cookie_samesite=settings.session_cookie_samesite,
    )
    logger.info(
        "Session middleware configured",
        extra={"extra_data": {
            "cookie_name": handler.config.cookie_name,
            "lifetime_seconds": handler.config.max_lifetime_seconds,
        }}
    )
