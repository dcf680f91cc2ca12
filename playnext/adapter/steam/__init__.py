"""Steam OpenID and Web API adapters."""

from .openid import MockSteamOpenIDClient, RealSteamOpenIDClient
from .profile import MockSteamProfileClient, RealSteamProfileClient

__all__ = [
    "MockSteamOpenIDClient",
    "MockSteamProfileClient",
    "RealSteamOpenIDClient",
    "RealSteamProfileClient",
]
