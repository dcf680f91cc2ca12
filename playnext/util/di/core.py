"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from playnext.config import AuthSettings, Settings, SteamSettings
from playnext.util.di.base import ProviderBase
from playnext.util.error import ConfigurationError

DEFAULT_SECRET = "CHANGE_ME_IN_PRODUCTION"


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment.

        Raises:
            ConfigurationError: If production runs with default secrets
        """
        settings = Settings()
        if settings.is_production:
            unset = [
                name
                for name, value in (
                    ("AUTH__JWT_SECRET", settings.auth.jwt_secret),
                    ("AUTH__CREDENTIAL_SECRET", settings.auth.credential_secret),
                    ("AUTH__STEAM__API_KEY", settings.auth.steam.api_key),
                )
                if value == DEFAULT_SECRET
            ]
            if unset:
                raise ConfigurationError(
                    f"Must be configured in production: {', '.join(unset)}"
                )
        return settings

    @provide(scope=Scope.APP)
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        """Provide auth settings."""
        return settings.auth

    @provide(scope=Scope.APP)
    def provide_steam_settings(self, auth_settings: AuthSettings) -> SteamSettings:
        """Provide Steam settings."""
        return auth_settings.steam
