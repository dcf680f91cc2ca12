"""Anti-forgery state domain service.

Issues and verifies the single-use LinkState that correlates a Steam login
or link attempt across the external redirect. The state lives only in a
caller-held slot; the server keeps no table of pending attempts.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable

import logfire

from playnext.config import AuthSettings
from playnext.domain.error import InvalidStateError
from playnext.domain.model.link_state import LinkState
from playnext.domain.value import LinkMode
from playnext.util.jwt import JWTError, seal_claims, unseal_claims

from .base import Service

LINK_STATE_AUDIENCE = "steam-link-state"

# 32 bytes -> 256 bits of entropy
STATE_TOKEN_BYTES = 32


class CredentialSlot:
    """Scoped, caller-held credential storage interface.

    Values survive a redirect round trip but are only readable by the server.
    """

    def put(self, key: str, value: str, ttl: timedelta) -> None:
        """Store a value for at most ttl."""
        raise NotImplementedError

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent or expired."""
        raise NotImplementedError

    def delete(self, key: str) -> None:
        """Remove the value."""
        raise NotImplementedError


def normalize_return_to(return_to: str | None) -> str:
    """Keep only same-origin relative paths.

    Args:
        return_to: Requested post-auth path

    Returns:
        The path if it is a plain relative path, otherwise "/"
    """
    if not return_to:
        return "/"
    if not return_to.startswith("/") or return_to.startswith("//"):
        return "/"
    if "\\" in return_to or any(ord(c) < 0x20 for c in return_to):
        return "/"
    return return_to


class LinkStateService(Service):
    """Domain service for LinkState issuance and verification."""

    def __init__(
        self,
        auth_settings: AuthSettings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize link state service.

        Args:
            auth_settings: Authentication settings (signing key, TTL, slot key)
            clock: Returns the current UTC time (injectable for tests)
        """
        self.auth_settings = auth_settings
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=self.auth_settings.link_state_ttl_minutes)

    @property
    def slot_key(self) -> str:
        return self.auth_settings.link_state_cookie

    def issue(self, mode: LinkMode, return_to: str | None = None) -> LinkState:
        """Issue a fresh LinkState.

        Args:
            mode: Login or link
            return_to: Post-auth relative path

        Returns:
            New LinkState with a random token and expiry
        """
        now = self._clock()
        state = LinkState(
            state_token=secrets.token_urlsafe(STATE_TOKEN_BYTES),
            issued_at=now,
            expires_at=now + self.ttl,
            mode=mode,
            return_to=normalize_return_to(return_to),
        )
        logfire.info(
            "Link state issued",
            mode=mode.value,
            expires_at=state.expires_at.isoformat(),
        )
        return state

    def seal(self, state: LinkState) -> str:
        """Serialize a LinkState into a tamper-evident string."""
        return seal_claims(
            {
                "state_token": state.state_token,
                "issued_at": state.issued_at.timestamp(),
                "expires_at": state.expires_at.timestamp(),
                "mode": state.mode.value,
                "return_to": state.return_to,
            },
            LINK_STATE_AUDIENCE,
            self.auth_settings,
        )

    def unseal(self, raw: str) -> LinkState:
        """Restore a LinkState from its sealed form.

        Raises:
            InvalidStateError: If the value was tampered with or is malformed
        """
        try:
            claims = unseal_claims(raw, LINK_STATE_AUDIENCE, self.auth_settings)
            return LinkState(
                state_token=claims["state_token"],
                issued_at=datetime.fromtimestamp(claims["issued_at"], timezone.utc),
                expires_at=datetime.fromtimestamp(claims["expires_at"], timezone.utc),
                mode=LinkMode(claims["mode"]),
                return_to=normalize_return_to(claims.get("return_to")),
            )
        except (JWTError, KeyError, TypeError, ValueError) as e:
            logfire.warn("Link state could not be unsealed", error=str(e))
            raise InvalidStateError("Link state is malformed or was tampered with")

    def persist(self, state: LinkState, slot: CredentialSlot) -> None:
        """Hand the sealed state to the caller-held slot."""
        slot.put(self.slot_key, self.seal(state), self.ttl)

    def verify(self, supplied_token: str | None, slot: CredentialSlot) -> LinkState:
        """Consume the stored state and check it against the callback's token.

        The slot is cleared whether or not verification succeeds, so a token
        can be used at most once.

        Args:
            supplied_token: State token echoed back by the provider redirect
            slot: Caller-held slot holding the sealed state

        Returns:
            The verified LinkState

        Raises:
            InvalidStateError: If either value is absent, they differ, or the
                state has expired
        """
        with logfire.span("link_state_service.verify"):
            try:
                raw = slot.get(self.slot_key)
            finally:
                slot.delete(self.slot_key)

            if not supplied_token or not raw:
                logfire.warn(
                    "Link state missing",
                    has_supplied=bool(supplied_token),
                    has_stored=bool(raw),
                )
                raise InvalidStateError("Link state is missing")

            state = self.unseal(raw)

            if not secrets.compare_digest(
                supplied_token.encode("utf-8"), state.state_token.encode("utf-8")
            ):
                logfire.warn("Link state mismatch", mode=state.mode.value)
                raise InvalidStateError("Link state does not match")

            if state.is_expired(self._clock()):
                logfire.warn(
                    "Link state expired",
                    mode=state.mode.value,
                    expires_at=state.expires_at.isoformat(),
                )
                raise InvalidStateError("Link state has expired")

            logfire.info("Link state verified", mode=state.mode.value)
            return state
