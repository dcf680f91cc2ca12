"""Session issuance domain service."""

import logfire

from playnext.domain.error import (
    DirectoryAuthenticationError,
    DirectoryUnavailableError,
    SessionIssuanceFailedError,
)
from playnext.domain.model.resolution import Resolution
from playnext.domain.repository.user_directory import UserDirectory
from playnext.domain.value import (
    AuthenticatedContext,
    ResolutionOutcome,
    SessionCredential,
)
from playnext.util.jwt import JWTError

from .base import Service
from .credential_service import CredentialDeriver
from .jwt_service import JWTService


class SessionIssuer(Service):
    """Exchanges a resolved identity for an application session."""

    def __init__(
        self,
        user_directory: UserDirectory,
        credential_deriver: CredentialDeriver,
        jwt_service: JWTService,
    ) -> None:
        """Initialize session issuer.

        Args:
            user_directory: User directory to authenticate against
            credential_deriver: Derives directory secrets for Steam users
            jwt_service: Session token service
        """
        self.user_directory = user_directory
        self.credential_deriver = credential_deriver
        self.jwt_service = jwt_service

    async def issue(
        self, resolution: Resolution, context: AuthenticatedContext
    ) -> SessionCredential:
        """Authenticate the resolved user and emit a session token.

        PROVISIONED and SIGNED_IN authenticate with the derived secret.
        LINKED re-checks the caller's existing session instead.

        Args:
            resolution: Identity resolver result
            context: Caller's current session

        Returns:
            New session credential

        Raises:
            SessionIssuanceFailedError: If the directory rejects the secret,
                is unavailable, or the existing session no longer holds
        """
        user = resolution.user
        with logfire.span(
            "session_issuer.issue",
            outcome=resolution.outcome.value,
            user_id=str(user.id),
        ):
            try:
                if resolution.outcome in (
                    ResolutionOutcome.PROVISIONED,
                    ResolutionOutcome.SIGNED_IN,
                ):
                    if user.external_id is None:
                        raise SessionIssuanceFailedError(
                            "Resolved user has no Steam ID"
                        )
                    secret = self.credential_deriver.derive(user.external_id)
                    user = await self.user_directory.authenticate(user.id, secret)
                elif resolution.outcome in (
                    ResolutionOutcome.LINKED,
                    ResolutionOutcome.LINK_REJECTED_ALREADY_LINKED_TO_SELF,
                ):
                    if not context.token:
                        raise SessionIssuanceFailedError("No session to extend")
                    payload = self.jwt_service.verify_token(context.token)
                    if payload.user_id != str(user.id):
                        raise SessionIssuanceFailedError(
                            "Session does not belong to the linked user"
                        )
                else:
                    raise SessionIssuanceFailedError(
                        f"No session for outcome {resolution.outcome.value}"
                    )
            except SessionIssuanceFailedError as e:
                logfire.error(
                    "Session issuance failed",
                    user_id=str(resolution.user.id),
                    outcome=resolution.outcome.value,
                    error=str(e),
                )
                raise
            except (
                DirectoryAuthenticationError,
                DirectoryUnavailableError,
                JWTError,
            ) as e:
                logfire.error(
                    "Session issuance failed",
                    user_id=str(resolution.user.id),
                    outcome=resolution.outcome.value,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise SessionIssuanceFailedError(str(e)) from e

            return self.jwt_service.create_session(user)
