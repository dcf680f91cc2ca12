"""Domain services."""

from .base import Service
from .credential_service import CredentialDeriver
from .identity_resolver import IdentityResolver
from .jwt_service import JWTService
from .link_state_service import CredentialSlot, LinkStateService
from .session_service import SessionIssuer
from .steam_auth_service import SteamAuthService, SteamOpenIDClient, SteamProfileClient
from .user_service import UserService

__all__ = [
    "CredentialDeriver",
    "CredentialSlot",
    "IdentityResolver",
    "JWTService",
    "LinkStateService",
    "Service",
    "SessionIssuer",
    "SteamAuthService",
    "SteamOpenIDClient",
    "SteamProfileClient",
    "UserService",
]
