"""Credential slots backed by HTTP cookies or process memory."""

from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Callable

from starlette.responses import Response

from playnext.domain.service.link_state_service import CredentialSlot


class CookieCredentialSlot(CredentialSlot):
    """Credential slot stored in HTTP-only cookies on the caller's browser.

    Reads come from the request cookies. Writes and deletes are buffered and
    written to the outgoing response by apply(), since the response object
    usually does not exist yet when the slot is used.
    """

    def __init__(self, cookies: Mapping[str, str], secure: bool) -> None:
        """Initialize cookie slot.

        Args:
            cookies: Cookies sent with the current request
            secure: Mark cookies Secure (production)
        """
        self._cookies = dict(cookies)
        self._secure = secure
        self._pending_set: dict[str, tuple[str, timedelta]] = {}
        self._pending_delete: set[str] = set()

    def put(self, key: str, value: str, ttl: timedelta) -> None:
        self._pending_delete.discard(key)
        self._pending_set[key] = (value, ttl)

    def get(self, key: str) -> str | None:
        if key in self._pending_delete:
            return None
        if key in self._pending_set:
            return self._pending_set[key][0]
        return self._cookies.get(key)

    def delete(self, key: str) -> None:
        self._pending_set.pop(key, None)
        self._pending_delete.add(key)

    def apply(self, response: Response) -> None:
        """Write buffered changes to the response as Set-Cookie headers."""
        for key, (value, ttl) in self._pending_set.items():
            response.set_cookie(
                key=key,
                value=value,
                httponly=True,
                secure=self._secure,
                # Lax so the cookie survives the top-level redirect back from Steam
                samesite="lax",
                path="/",
                max_age=int(ttl.total_seconds()),
            )
        for key in self._pending_delete:
            response.delete_cookie(
                key=key,
                path="/",
                secure=self._secure,
                httponly=True,
                samesite="lax",
            )


class InMemoryCredentialSlot(CredentialSlot):
    """Credential slot held in memory, honouring TTLs.

    Useful for tests that exercise LinkState without HTTP.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._values: dict[str, tuple[str, datetime]] = {}

    def put(self, key: str, value: str, ttl: timedelta) -> None:
        self._values[key] = (value, self._clock() + ttl)

    def get(self, key: str) -> str | None:
        entry = self._values.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._values[key]
            return None
        return value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)
