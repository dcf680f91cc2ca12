"""Complete Steam login/link use case."""

from collections.abc import Mapping

import logfire
from pydantic import BaseModel, Field

from playnext.application.usecase.base import BaseUseCase
from playnext.domain.error import (
    DirectoryError,
    ExternalAuthError,
    SessionIssuanceFailedError,
)
from playnext.domain.service import (
    CredentialSlot,
    IdentityResolver,
    LinkStateService,
    SessionIssuer,
    SteamAuthService,
)
from playnext.domain.value import (
    AuthenticatedContext,
    LinkMode,
    ResolutionOutcome,
    SessionCredential,
)

# Query parameter carrying the LinkState token through Steam's return_to
STATE_PARAM = "state"

ALREADY_LINKED_TO_YOU_NOTICE = "already_linked_to_you"


class CompleteExternalLoginRequest(BaseModel):
    """Steam callback request.

    params holds every query parameter of the callback, openid.* and state.
    """

    params: dict[str, str]
    context: AuthenticatedContext = Field(default_factory=AuthenticatedContext.anonymous)


class CompleteExternalLoginResponse(BaseModel):
    """Steam callback response."""

    outcome: ResolutionOutcome
    mode: LinkMode
    user_id: str
    session: SessionCredential
    return_to: str = "/"
    notice: str | None = None  # Non-error message for the frontend


class CompleteExternalLoginUseCase(BaseUseCase):
    """Use case for turning a Steam callback into an application session.

    Steps run strictly in order and stop at the first failure:
    state, assertion, profile, resolution, session. Nothing touches the
    directory before the state and assertion have both been verified.
    """

    def __init__(
        self,
        link_state_service: LinkStateService,
        steam_auth_service: SteamAuthService,
        identity_resolver: IdentityResolver,
        session_issuer: SessionIssuer,
    ) -> None:
        """Initialize complete external login use case.

        Args:
            link_state_service: Anti-forgery state service
            steam_auth_service: Steam assertion and profile service
            identity_resolver: Identity resolver state machine
            session_issuer: Session issuer
        """
        self.link_state_service = link_state_service
        self.steam_auth_service = steam_auth_service
        self.identity_resolver = identity_resolver
        self.session_issuer = session_issuer

    async def execute(
        self, request: CompleteExternalLoginRequest, slot: CredentialSlot
    ) -> CompleteExternalLoginResponse:
        """Execute the callback flow.

        Args:
            request: Callback parameters and the caller's session
            slot: Caller-held slot with the sealed LinkState (always cleared)

        Returns:
            Outcome, the new session and where to send the caller

        Raises:
            ExternalAuthError: Any failure, tagged with the attempt's mode
                once it is known
        """
        with logfire.span(
            "complete_external_login",
            authenticated=request.context.is_authenticated,
        ):
            state = self.link_state_service.verify(
                request.params.get(STATE_PARAM), slot
            )

            try:
                identity = await self.steam_auth_service.verify_identity(request.params)
                resolution = await self.identity_resolver.resolve(
                    identity, state.mode, request.context
                )
                session = await self.session_issuer.issue(resolution, request.context)
            except ExternalAuthError as e:
                e.mode = state.mode.value
                logfire.warn(
                    "Steam callback failed",
                    mode=state.mode.value,
                    code=e.code,
                    error=str(e),
                )
                raise
            except DirectoryError as e:
                logfire.error(
                    "Directory failed during Steam callback",
                    mode=state.mode.value,
                    error=str(e),
                )
                raise SessionIssuanceFailedError(str(e), mode=state.mode.value) from e

            notice = (
                ALREADY_LINKED_TO_YOU_NOTICE
                if resolution.outcome
                == ResolutionOutcome.LINK_REJECTED_ALREADY_LINKED_TO_SELF
                else None
            )

            logfire.info(
                "Steam callback completed",
                mode=state.mode.value,
                outcome=resolution.outcome.value,
                user_id=str(resolution.user.id),
            )

            return CompleteExternalLoginResponse(
                outcome=resolution.outcome,
                mode=state.mode,
                user_id=str(resolution.user.id),
                session=session,
                return_to=state.return_to,
                notice=notice,
            )

    @staticmethod
    def callback_params(query: Mapping[str, str]) -> dict[str, str]:
        """Keep only the parameters the callback flow reads."""
        return {
            key: value
            for key, value in query.items()
            if key.startswith("openid.") or key == STATE_PARAM
        }
