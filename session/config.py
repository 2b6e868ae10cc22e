"""Session configuration shared by the handler, the facade and the middleware."""

import hashlib
from dataclasses import dataclass

from config.settings import (
    DEFAULT_REFRESH_THRESHOLD_SECONDS,
    DEFAULT_SESSION_LIFETIME_SECONDS,
    Settings,
)


@dataclass(frozen=True)
class SessionConfig:
    """
    Immutable session settings.

    Attributes:
        max_lifetime_seconds: TTL given to a session record on every write
            and on a read-triggered refresh. Defaults to 30 days.
        session_name: Base name of the session cookie.
        refresh_threshold_seconds: A read extends the record when its
            remaining TTL drops below this value. Defaults to 7 days.
        app_root: Application root; its hash scopes the cookie name so that
            two applications on one host do not share sessions.
    """
    max_lifetime_seconds: int = DEFAULT_SESSION_LIFETIME_SECONDS
    session_name: str = "NovaSession"
    refresh_threshold_seconds: int = DEFAULT_REFRESH_THRESHOLD_SECONDS
    app_root: str = ""

    def __post_init__(self):
        if self.max_lifetime_seconds <= 0:
            raise ValueError("max_lifetime_seconds must be positive")
        if self.refresh_threshold_seconds <= 0:
            raise ValueError("refresh_threshold_seconds must be positive")

    @property
    def cookie_name(self) -> str:
        """Session cookie name, e.g. "3f2a9c1d_NovaSession"."""
        digest = hashlib.md5(self.app_root.encode("utf-8")).hexdigest()
        return f"{digest[8:16]}_{self.session_name}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionConfig":
        return cls(
            max_lifetime_seconds=settings.session_lifetime_seconds,
            session_name=settings.session_name,
            refresh_threshold_seconds=settings.session_refresh_threshold_seconds,
            app_root=settings.app_root,
        )
