"""
Per-request session facade.

Session holds one client's variable bag for the duration of a request. It
is created by SessionMiddleware with the id taken from the session cookie
and started lazily on first access: the id is validated, the payload is
loaded through the SessionHandler and decoded from JSON. At the end of the
request the middleware closes it, which writes the bag back when it
changed.

Values can carry their own expiry: set("otp", code, expire=300) stores a
"otp_expire" marker next to the value, and get() drops both once the
marker is in the past.
"""

import json
import logging
import re
import secrets
import time
from typing import Any, Callable, Dict, Optional

from errors.exceptions import validation_error
from session.config import SessionConfig
from session.handler import SessionHandler

logger = logging.getLogger(__name__)

EXPIRE_SUFFIX = "_expire"

_SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{22,128}$")


def generate_session_id() -> str:
    """Return a new random session id (256 bits, URL-safe)."""
    return secrets.token_urlsafe(32)


def is_valid_session_id(session_id: Optional[str]) -> bool:
    return bool(session_id) and _SESSION_ID_PATTERN.match(session_id) is not None


class Session:
    """
    Get/set/delete access to one client's session data.

    Not safe to share between requests; build one per request.
    """

    def __init__(
        self,
        handler: SessionHandler,
        session_id: Optional[str] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Args:
            handler: Storage handler for session records.
            session_id: Id presented by the client, if any. Ids that are
                malformed or have no stored data are replaced by a fresh one
                on start.
            clock: Time source in seconds, used for per-value expiry.
        """
        self.handler = handler
        self.clock = clock
        self._requested_id = session_id
        self._id: Optional[str] = None
        self._data: Dict[str, Any] = {}
        self._loaded_payload = ""
        self._started = False
        self._destroyed = False

    @property
    def config(self) -> SessionConfig:
        return self.handler.config

    @property
    def cookie_name(self) -> str:
        return self.config.cookie_name

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def session_id(self) -> Optional[str]:
        """Current id, or None if the session was never started or was destroyed."""
        return self._id

    async def start(self) -> None:
        """
        Load the session. Calling start() on a started session does nothing.
        """
        if self._started:
            return

        await self.handler.open("", self.cookie_name)

        payload = ""
        session_id = self._requested_id
        if is_valid_session_id(session_id):
            payload = await self.handler.read(session_id)
        elif session_id:
            logger.info("Rejected malformed session id")

        if not payload:
            # Unknown ids are never adopted, so a client cannot choose its id
            session_id = generate_session_id()

        self._id = session_id
        self._data = self._decode(payload)
        self._loaded_payload = payload
        self._started = True
        self._destroyed = False

    async def _ensure_started(self) -> None:
        if not self._started:
            await self.start()

    def _decode(self, payload: str) -> Dict[str, Any]:
        if not payload:
            return {}
        try:
            data = json.loads(payload)
        except ValueError:
            data = None
        if not isinstance(data, dict):
            logger.warning(
                "Discarding undecodable session payload",
                extra={"extra_data": {"payload_length": len(payload)}}
            )
            return {}
        return data

    async def id(self) -> str:
        """Return the session id, starting the session if needed."""
        await self._ensure_started()
        return self._id

    async def regenerate_id(self, delete_old: bool = False) -> str:
        """
        Move the session data to a new id.

        Use after a privilege change such as a login. The data is written
        under the new id when the session closes.

        With delete_old=False the record under the old id is left in place
        and a later destroy() only removes the new one, so the old cookie
        keeps working until that record expires. Pass delete_old=True
        whenever the old id must stop being valid.

        Args:
            delete_old: Also destroy the record stored under the old id.

        Returns:
            The new session id.
        """
        await self._ensure_started()
        old_id = self._id
        if delete_old:
            await self.handler.destroy(old_id)
        self._id = generate_session_id()
        # Force a write under the new id
        self._loaded_payload = ""
        return self._id

    async def set(self, name: str, value: Any, expire: int = 0) -> None:
        """
        Store a value.

        Args:
            name: Variable name.
            value: Any JSON-serializable value.
            expire: Lifetime of this value in seconds; 0 keeps it for the
                whole session.

        Raises:
            AppException: VALIDATION_ERROR if value cannot be serialized.
        """
        await self._ensure_started()
        try:
            json.dumps(value)
        except (TypeError, ValueError) as e:
            raise validation_error(
                f"Session value '{name}' is not JSON serializable",
                details={"name": name, "error": str(e)}
            ) from e

        if expire != 0:
            self._data[name + EXPIRE_SUFFIX] = self.clock() + expire
        else:
            self._data.pop(name + EXPIRE_SUFFIX, None)
        self._data[name] = value

    async def get(self, name: str, default: Any = None) -> Any:
        """
        Return a stored value, or default if it is not set.

        A value whose expiry has passed is removed and None is returned.
        """
        await self._ensure_started()
        if name not in self._data:
            return default

        expires_at = self._data.get(name + EXPIRE_SUFFIX)
        if expires_at is None or expires_at == 0 or expires_at > self.clock():
            return self._data[name]

        del self._data[name]
        del self._data[name + EXPIRE_SUFFIX]
        return None

    async def delete(self, name: str) -> None:
        """Remove a value and its expiry marker, if present."""
        await self._ensure_started()
        self._data.pop(name, None)
        self._data.pop(name + EXPIRE_SUFFIX, None)

    async def close(self) -> None:
        """
        End the session for this request without deleting it.

        The bag is written back only when it differs from what was loaded;
        an unchanged session keeps its TTL and relies on the sliding
        refresh in SessionHandler.read().
        """
        if not self._started:
            return

        payload = json.dumps(self._data, separators=(",", ":"))
        if payload != self._loaded_payload:
            await self.handler.write(self._id, payload)
            self._loaded_payload = payload
        await self.handler.close()
        self._requested_id = self._id
        self._started = False

    async def destroy(self) -> None:
        """Delete all session data and the stored record."""
        if not self._started and self._requested_id:
            await self.start()
        if not self._started:
            return

        await self.handler.destroy(self._id)
        await self.handler.close()
        self._data = {}
        self._loaded_payload = ""
        self._id = None
        self._requested_id = None
        self._started = False
        self._destroyed = True
