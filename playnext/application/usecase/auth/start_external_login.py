"""Start Steam login/link use case."""

import logfire
from pydantic import BaseModel, Field

from playnext.application.usecase.base import BaseUseCase
from playnext.domain.error import NotAuthenticatedError
from playnext.domain.service import CredentialSlot, LinkStateService, SteamAuthService
from playnext.domain.value import AuthenticatedContext, LinkMode


class StartExternalLoginRequest(BaseModel):
    """Start Steam handshake request."""

    mode: LinkMode = LinkMode.LOGIN
    return_to: str | None = None  # Relative frontend path to land on afterwards
    context: AuthenticatedContext = Field(default_factory=AuthenticatedContext.anonymous)


class StartExternalLoginResponse(BaseModel):
    """Start Steam handshake response."""

    authorization_url: str
    mode: LinkMode


class StartExternalLoginUseCase(BaseUseCase):
    """Use case for redirecting a caller to Steam."""

    def __init__(
        self,
        link_state_service: LinkStateService,
        steam_auth_service: SteamAuthService,
    ) -> None:
        """Initialize start external login use case.

        Args:
            link_state_service: Anti-forgery state service
            steam_auth_service: Steam auth domain service
        """
        self.link_state_service = link_state_service
        self.steam_auth_service = steam_auth_service

    async def execute(
        self, request: StartExternalLoginRequest, slot: CredentialSlot
    ) -> StartExternalLoginResponse:
        """Issue a LinkState, store it in the caller's slot and build the Steam URL.

        Args:
            request: Mode, return path and the caller's session
            slot: Caller-held slot that will carry the sealed state

        Returns:
            Steam authorization URL

        Raises:
            NotAuthenticatedError: If linking is requested without a session
        """
        with logfire.span("start_external_login", mode=request.mode.value):
            if request.mode == LinkMode.LINK and not request.context.is_authenticated:
                logfire.warn("Link requested without a session")
                raise NotAuthenticatedError(
                    "Sign in before linking a Steam account", mode=request.mode.value
                )

            state = self.link_state_service.issue(request.mode, request.return_to)
            self.link_state_service.persist(state, slot)

            return StartExternalLoginResponse(
                authorization_url=self.steam_auth_service.build_login_url(
                    state.state_token
                ),
                mode=state.mode,
            )
