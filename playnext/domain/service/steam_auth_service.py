"""Steam authentication domain service."""

from collections.abc import Mapping

import logfire

from playnext.config import AuthSettings
from playnext.domain.error import ProfileUnavailableError
from playnext.domain.value import ExternalIdentity, SteamId, SteamProfile, VerifiedAssertion

from .base import Service


class SteamOpenIDClient:
    """Steam OpenID 2.0 handshake client interface."""

    def build_authorization_request(
        self, state_token: str, return_endpoint: str, realm: str
    ) -> str:
        """Build the redirect URL that starts the handshake.

        Args:
            state_token: Anti-forgery token to carry through the round trip
            return_endpoint: Callback URL Steam redirects back to
            realm: Realm the user is asked to trust

        Returns:
            Steam login URL
        """
        raise NotImplementedError

    async def verify_assertion(self, params: Mapping[str, str]) -> VerifiedAssertion:
        """Verify the callback assertion with Steam.

        Args:
            params: All query parameters of the callback

        Returns:
            The verified claimed identity

        Raises:
            ProviderRejectedError: Steam did not confirm the assertion
            MalformedAssertionError: Parameters are not a valid Steam assertion
            NetworkFailureError: Steam could not be reached (after one retry)
        """
        raise NotImplementedError


class SteamProfileClient:
    """Steam Web API player summary client interface."""

    async def fetch(self, external_id: SteamId) -> SteamProfile:
        """Fetch the public profile for a Steam ID.

        Raises:
            ProfileUnavailableError: No usable profile was returned
            NetworkFailureError: Steam could not be reached
        """
        raise NotImplementedError


class SteamAuthService(Service):
    """Domain service for the Steam side of the handshake.

    Builds the outbound redirect and turns an inbound callback into a
    verified, profile-enriched ExternalIdentity.
    """

    def __init__(
        self,
        openid_client: SteamOpenIDClient,
        profile_client: SteamProfileClient,
        auth_settings: AuthSettings,
    ) -> None:
        """Initialize Steam auth service.

        Args:
            openid_client: OpenID handshake client
            profile_client: Player summary client
            auth_settings: Authentication settings (callback URL, realm)
        """
        self.openid_client = openid_client
        self.profile_client = profile_client
        self.auth_settings = auth_settings

    def build_login_url(self, state_token: str) -> str:
        """Build the Steam redirect URL for a login or link attempt."""
        return self.openid_client.build_authorization_request(
            state_token,
            self.auth_settings.steam_callback_url,
            self.auth_settings.steam_realm,
        )

    async def verify_identity(self, params: Mapping[str, str]) -> ExternalIdentity:
        """Verify a callback and resolve the Steam ID to a profile.

        Args:
            params: All query parameters of the callback

        Returns:
            Verified external identity with display name and avatar

        Raises:
            ExternalAuthError: Any verification or profile failure
        """
        with logfire.span("steam_auth_service.verify_identity"):
            assertion = await self.openid_client.verify_assertion(params)
            profile = await self.profile_client.fetch(assertion.external_id)

            if profile.steam_id != assertion.external_id:
                logfire.error(
                    "Profile does not match verified Steam ID",
                    external_id=assertion.external_id.root,
                    profile_steam_id=profile.steam_id.root,
                )
                raise ProfileUnavailableError("Profile does not match Steam ID")

            identity = ExternalIdentity.from_profile(profile)
            logfire.info(
                "Steam identity verified",
                external_id=identity.external_id.root,
                display_name=identity.display_name,
            )
            return identity
