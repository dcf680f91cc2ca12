"""Domain value objects for Steam identity login and linking.

Value objects are immutable and defined by their values, not identity.
"""

import re
from datetime import datetime
from enum import Enum

from pydantic import field_validator

from playnext.domain.value.common import RootValueObject, ValueObject
from playnext.domain.value.identifiers import UserId


class LinkMode(str, Enum):
    """What the caller asked for when starting the Steam handshake."""

    LOGIN = "login"
    LINK = "link"


class ResolutionOutcome(str, Enum):
    """Terminal states of the identity resolver."""

    PROVISIONED = "provisioned"
    SIGNED_IN = "signed_in"
    LINKED = "linked"
    CONFLICT_REJECTED = "conflict_rejected"
    LINK_REJECTED_ALREADY_LINKED_TO_SELF = "link_rejected_already_linked_to_self"


class SteamId(RootValueObject[str]):
    """SteamID64 as claimed in a verified OpenID assertion.

    Always 17 decimal digits, e.g. 76561197960287930.
    """

    @field_validator("root")
    @classmethod
    def validate_steam_id(cls, v: str) -> str:
        """Validate SteamID64 format."""
        if not re.fullmatch(r"\d{17}", v):
            raise ValueError("SteamID64 must be exactly 17 digits")
        return v


class VerifiedAssertion(ValueObject):
    """An OpenID assertion Steam has confirmed as valid."""

    external_id: SteamId
    claimed_id: str


class SteamProfile(ValueObject):
    """Public player summary from the Steam Web API."""

    steam_id: SteamId
    persona_name: str
    avatar_url: str | None = None
    profile_url: str | None = None


class ExternalIdentity(ValueObject):
    """A verified Steam identity enriched with its public profile.

    Only ever constructed after signature verification.
    """

    external_id: SteamId
    display_name: str
    avatar_url: str | None = None

    @classmethod
    def from_profile(cls, profile: SteamProfile) -> "ExternalIdentity":
        return cls(
            external_id=profile.steam_id,
            display_name=profile.persona_name,
            avatar_url=profile.avatar_url,
        )


class AuthenticatedContext(ValueObject):
    """The caller's current application session, if any."""

    user_id: UserId | None = None
    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @classmethod
    def anonymous(cls) -> "AuthenticatedContext":
        return cls()


class SessionCredential(ValueObject):
    """An application session token issued after resolution."""

    token: str
    user_id: UserId
    expires_at: datetime
