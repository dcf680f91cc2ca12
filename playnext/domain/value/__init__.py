"""Domain value objects."""

from playnext.domain.value.identifiers import UserId
from playnext.domain.value.types import (
    AuthenticatedContext,
    ExternalIdentity,
    LinkMode,
    ResolutionOutcome,
    SessionCredential,
    SteamId,
    SteamProfile,
    VerifiedAssertion,
)

__all__ = [
    # Identifiers
    "UserId",
    # Types
    "AuthenticatedContext",
    "ExternalIdentity",
    "LinkMode",
    "ResolutionOutcome",
    "SessionCredential",
    "SteamId",
    "SteamProfile",
    "VerifiedAssertion",
]
