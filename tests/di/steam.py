"""Mock Steam providers for testing."""

from dishka import Scope, provide

from playnext.adapter.steam import MockSteamOpenIDClient, MockSteamProfileClient
from playnext.config import SteamSettings
from playnext.domain.service import SteamOpenIDClient, SteamProfileClient
from playnext.util.di.infrastructure.steam import SteamProvider


class MockSteamProvider(SteamProvider):
    """Mock Steam provider that never contacts Steam."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_mock_profile_client(self) -> MockSteamProfileClient:
        """Provide mock profile client (exposed so tests can register profiles)."""
        return MockSteamProfileClient()

    @provide(scope=Scope.APP)
    def get_steam_openid_client(self, steam_settings: SteamSettings) -> SteamOpenIDClient:
        """Provide mock Steam OpenID client."""
        return MockSteamOpenIDClient(endpoint=steam_settings.openid_endpoint)

    @provide(scope=Scope.APP)
    def get_steam_profile_client(
        self, profile_client: MockSteamProfileClient
    ) -> SteamProfileClient:
        """Provide mock Steam profile client."""
        return profile_client
