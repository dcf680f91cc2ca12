"""JWT token domain service."""

from uuid import UUID

import logfire

from playnext.config import AuthSettings
from playnext.domain.model.user import DirectoryUser
from playnext.domain.value import AuthenticatedContext, SessionCredential, UserId
from playnext.util.jwt import TokenPayload, create_token, verify_token

from .base import Service


class JWTService(Service):
    """Domain service for session token operations."""

    def __init__(self, auth_settings: AuthSettings) -> None:
        """Initialize JWT service.

        Args:
            auth_settings: Authentication settings
        """
        self.auth_settings = auth_settings

    def create_session(self, user: DirectoryUser) -> SessionCredential:
        """Create a session token for a directory user.

        Args:
            user: Authenticated directory user

        Returns:
            Session credential with token and expiry
        """
        with logfire.span("jwt_service.create_session", user_id=str(user.id)):
            token, expires_at = create_token(
                user_id=str(user.id),
                external_id=user.external_id.root if user.external_id else None,
                display_name=user.display_name,
                settings=self.auth_settings,
            )
            logfire.info("Session token created", user_id=str(user.id))
            return SessionCredential(token=token, user_id=user.id, expires_at=expires_at)

    def verify_token(self, token: str) -> TokenPayload:
        """Verify session token and extract payload.

        Raises:
            JWTError: If token is invalid or expired
        """
        with logfire.span("jwt_service.verify_token"):
            try:
                payload = verify_token(token, self.auth_settings)
                logfire.info("Session token verified", user_id=payload.user_id)
                return payload
            except Exception as e:
                logfire.warn("Session token verification failed", error=str(e))
                raise

    def context_from_token(self, token: str | None) -> AuthenticatedContext:
        """Build the caller's authenticated context without raising.

        Args:
            token: Session token from the cookie (optional)

        Returns:
            Authenticated context, anonymous if the token is missing or invalid
        """
        if not token:
            return AuthenticatedContext.anonymous()

        try:
            payload = self.verify_token(token)
            return AuthenticatedContext(user_id=UserId(UUID(payload.user_id)), token=token)
        except Exception as e:
            logfire.debug(
                "Session token rejected, treating as anonymous", error=str(e)
            )
            return AuthenticatedContext.anonymous()
