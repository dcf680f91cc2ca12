"""Domain layer DI providers."""

from dishka import Scope, provide

from playnext.config import AuthSettings
from playnext.domain.repository import UserDirectory
from playnext.domain.service import (
    CredentialDeriver,
    IdentityResolver,
    JWTService,
    LinkStateService,
    SessionIssuer,
    SteamAuthService,
    SteamOpenIDClient,
    SteamProfileClient,
    UserService,
)
from playnext.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_steam_auth_service(
        self,
        openid_client: SteamOpenIDClient,
        profile_client: SteamProfileClient,
        auth_settings: AuthSettings,
    ) -> SteamAuthService:
        """Provide Steam authentication domain service."""
        return SteamAuthService(
            openid_client=openid_client,
            profile_client=profile_client,
            auth_settings=auth_settings,
        )

    @provide
    def get_jwt_service(self, auth_settings: AuthSettings) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=auth_settings)

    @provide
    def get_link_state_service(self, auth_settings: AuthSettings) -> LinkStateService:
        """Provide anti-forgery state domain service."""
        return LinkStateService(auth_settings=auth_settings)

    @provide(scope=Scope.APP)
    def get_credential_deriver(self, auth_settings: AuthSettings) -> CredentialDeriver:
        """Provide directory credential deriver (stateless, shared)."""
        return CredentialDeriver(auth_settings=auth_settings)

    @provide
    def get_identity_resolver(
        self, user_directory: UserDirectory, credential_deriver: CredentialDeriver
    ) -> IdentityResolver:
        """Provide identity resolver."""
        return IdentityResolver(
            user_directory=user_directory, credential_deriver=credential_deriver
        )

    @provide
    def get_session_issuer(
        self,
        user_directory: UserDirectory,
        credential_deriver: CredentialDeriver,
        jwt_service: JWTService,
    ) -> SessionIssuer:
        """Provide session issuer."""
        return SessionIssuer(
            user_directory=user_directory,
            credential_deriver=credential_deriver,
            jwt_service=jwt_service,
        )

    @provide
    def get_user_service(self, user_directory: UserDirectory) -> UserService:
        """Provide user domain service."""
        return UserService(user_directory=user_directory)
