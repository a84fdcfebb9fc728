"""Session identity: one durable client-side id, registered upstream once.

The id lives in a small key-value store with expiry. ``MemoryStore`` keeps it
in-process; ``CookieFileStore`` keeps it as a real cookie (path ``/``) in a
Netscape cookie file so it survives restarts the way a browser cookie does.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import timedelta
from http.cookiejar import Cookie, LoadError, MozillaCookieJar
from pathlib import Path
from urllib.parse import urlsplit

from planchat.client.relay_client import safe_reason
from planchat.config import settings
from planchat.errors import UpstreamError

logger = logging.getLogger(__name__)

INIT_TIMED_OUT = "Session initialization timed out."


class KeyValueStore(ABC):
    """Get/set of string values with a bounded lifetime."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value for *key*, or None if absent or expired."""

    @abstractmethod
    def set(self, key: str, value: str, max_age: timedelta) -> None:
        """Store *value* under *key* for *max_age*."""


class MemoryStore(KeyValueStore):
    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float]] = {}

    def get(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    def set(self, key: str, value: str, max_age: timedelta) -> None:
        self._data[key] = (value, self._clock() + max_age.total_seconds())


class CookieFileStore(KeyValueStore):
    """Cookie-backed store persisted to a Netscape cookie file."""

    def __init__(self, path: Path | str, domain: str | None = None) -> None:
        self.path = Path(path)
        self.domain = domain or urlsplit(settings.relay_url).hostname or "localhost"
        self._jar = MozillaCookieJar(str(self.path))
        if self.path.exists():
            try:
                self._jar.load()
            except (LoadError, OSError) as exc:
                # rewritten on the next set()
                logger.warning("Ignoring unreadable cookie file %s: %s", self.path, exc)
                self._jar.clear()

    def get(self, key: str) -> str | None:
        for cookie in self._jar:
            if cookie.name == key and cookie.domain == self.domain and cookie.path == "/":
                if cookie.is_expired():
                    return None
                return cookie.value
        return None

    def set(self, key: str, value: str, max_age: timedelta) -> None:
        expires = int(time.time() + max_age.total_seconds())
        self._jar.set_cookie(
            Cookie(
                version=0,
                name=key,
                value=value,
                port=None,
                port_specified=False,
                domain=self.domain,
                domain_specified=False,
                domain_initial_dot=False,
                path="/",
                path_specified=True,
                secure=False,
                expires=expires,
                discard=False,
                comment=None,
                comment_url=None,
                rest={},
            )
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._jar.save()


class SessionIdentityManager:
    """Hands out the session id, creating and registering it on first use.

    Registration runs in the background with its own short timeout, so a
    slow agent API never holds up the first message.
    """

    def __init__(
        self,
        store: KeyValueStore,
        relay,
        *,
        user_id: str | None = None,
        key: str | None = None,
        max_age: timedelta | None = None,
        init_timeout: float | None = None,
    ) -> None:
        self.store = store
        self.relay = relay
        self.user_id = user_id or settings.user_id
        self.key = key or settings.session_cookie_name
        self.max_age = max_age or settings.session_max_age
        self.init_timeout = init_timeout if init_timeout is not None else settings.session_init_timeout
        self.last_init_error: str | None = None
        self.registration: asyncio.Task[bool] | None = None

    @staticmethod
    def new_session_id() -> str:
        return str(uuid.uuid4())

    def obtain(self) -> tuple[str, bool]:
        """Return ``(session_id, fresh)``, persisting a new id when none is stored."""
        existing = self.store.get(self.key)
        if existing:
            logger.debug("Reusing stored session %s", existing)
            return existing, False

        session_id = self.new_session_id()
        self.store.set(self.key, session_id, self.max_age)
        logger.info("Created session %s", session_id)
        return session_id, True

    async def ensure_session(self) -> str:
        """Return the session id; a fresh one is registered without waiting."""
        session_id, fresh = self.obtain()
        if fresh:
            self.registration = asyncio.create_task(self.register(session_id))
            await asyncio.sleep(0)  # let the registration request start
        return session_id

    async def wait_registered(self) -> bool | None:
        """Await a pending registration. None when nothing was registered."""
        if self.registration is None:
            return None
        return await self.registration

    async def register(self, session_id: str) -> bool:
        """Best-effort upstream registration. Failures are logged, never raised."""
        try:
            await asyncio.wait_for(
                self.relay.initialize_session(self.user_id, session_id), self.init_timeout
            )
        except UpstreamError as exc:
            self.last_init_error = exc.message
            logger.warning(
                "Session initialization failed (%d): %s", exc.status_code, exc.message
            )
            return False
        except TimeoutError:
            self.last_init_error = INIT_TIMED_OUT
            logger.warning("Session initialization timed out after %.1fs", self.init_timeout)
            return False
        except Exception as exc:
            self.last_init_error = safe_reason(exc)
            logger.warning("Error initializing session: %r", exc)
            return False

        self.last_init_error = None
        logger.info("Session %s initialized or already exists", session_id)
        return True
