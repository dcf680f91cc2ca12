"""Application layer DI providers."""

from dishka import Scope, provide

from playnext.application.usecase.auth import (
    CompleteExternalLoginUseCase,
    GetCurrentUserUseCase,
    GetLinkStatusUseCase,
    StartExternalLoginUseCase,
    UnlinkSteamUseCase,
)
from playnext.domain.service import (
    IdentityResolver,
    JWTService,
    LinkStateService,
    SessionIssuer,
    SteamAuthService,
    UserService,
)
from playnext.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Steam auth use cases
    @provide(scope=Scope.REQUEST)
    def get_start_external_login_use_case(
        self,
        link_state_service: LinkStateService,
        steam_auth_service: SteamAuthService,
    ) -> StartExternalLoginUseCase:
        """Provide start external login use case."""
        return StartExternalLoginUseCase(
            link_state_service=link_state_service,
            steam_auth_service=steam_auth_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_complete_external_login_use_case(
        self,
        link_state_service: LinkStateService,
        steam_auth_service: SteamAuthService,
        identity_resolver: IdentityResolver,
        session_issuer: SessionIssuer,
    ) -> CompleteExternalLoginUseCase:
        """Provide complete external login use case."""
        return CompleteExternalLoginUseCase(
            link_state_service=link_state_service,
            steam_auth_service=steam_auth_service,
            identity_resolver=identity_resolver,
            session_issuer=session_issuer,
        )

    @provide(scope=Scope.REQUEST)
    def get_unlink_steam_use_case(self, user_service: UserService) -> UnlinkSteamUseCase:
        """Provide unlink Steam use case."""
        return UnlinkSteamUseCase(user_service=user_service)

    @provide(scope=Scope.REQUEST)
    def get_link_status_use_case(
        self, user_service: UserService
    ) -> GetLinkStatusUseCase:
        """Provide get link status use case."""
        return GetLinkStatusUseCase(user_service=user_service)

    # Session use cases
    @provide(scope=Scope.REQUEST)
    def get_current_user_use_case(
        self, jwt_service: JWTService, user_service: UserService
    ) -> GetCurrentUserUseCase:
        """Provide get current user use case."""
        return GetCurrentUserUseCase(jwt_service=jwt_service, user_service=user_service)
