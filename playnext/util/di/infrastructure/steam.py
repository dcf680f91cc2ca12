"""Steam infrastructure providers."""

from dishka import Scope, provide

from playnext.adapter.steam import RealSteamOpenIDClient, RealSteamProfileClient
from playnext.config import AuthSettings, SteamSettings
from playnext.domain.service import SteamOpenIDClient, SteamProfileClient
from playnext.util.di.base import ProviderBase


class SteamProvider(ProviderBase):
    """Steam component base."""

    __mock_component__ = "steam"


class ProdSteamProvider(SteamProvider):
    """Production Steam provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_steam_openid_client(
        self, steam_settings: SteamSettings, auth_settings: AuthSettings
    ) -> SteamOpenIDClient:
        """Provide Steam OpenID 2.0 client."""
        return RealSteamOpenIDClient(
            settings=steam_settings,
            return_endpoint=auth_settings.steam_callback_url,
        )

    @provide(scope=Scope.APP)
    def get_steam_profile_client(
        self, steam_settings: SteamSettings
    ) -> SteamProfileClient:
        """Provide Steam Web API profile client."""
        return RealSteamProfileClient(settings=steam_settings)
