"""Steam Web API player summary client."""

import httpx
import logfire

from playnext.config import SteamSettings
from playnext.domain.error import NetworkFailureError, ProfileUnavailableError
from playnext.domain.service.steam_auth_service import SteamProfileClient
from playnext.domain.value import SteamId, SteamProfile

PLAYER_SUMMARIES_PATH = "/ISteamUser/GetPlayerSummaries/v2/"


class RealSteamProfileClient(SteamProfileClient):
    """Reads public profiles through ISteamUser/GetPlayerSummaries."""

    def __init__(
        self,
        settings: SteamSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize Steam profile client.

        Args:
            settings: Steam settings (API key, base URL, timeout)
            transport: Optional httpx transport (for tests)
        """
        self.api_key = settings.api_key
        self.url = f"{settings.api_base_url.rstrip('/')}{PLAYER_SUMMARIES_PATH}"
        self.timeout = settings.request_timeout_seconds
        self._transport = transport

    async def fetch(self, external_id: SteamId) -> SteamProfile:
        """Fetch the player summary for a Steam ID.

        Args:
            external_id: SteamID64

        Returns:
            Steam profile

        Raises:
            NetworkFailureError: Request timed out or could not connect
            ProfileUnavailableError: Steam returned no usable player
        """
        with logfire.span("steam_profile.fetch", external_id=external_id.root):
            if not self.api_key:
                logfire.error("Steam Web API key is not configured")
                raise ProfileUnavailableError("Steam Web API key is not configured")

            params = {
                "key": self.api_key,
                "steamids": external_id.root,
                "format": "json",
            }

            try:
                async with httpx.AsyncClient(
                    transport=self._transport, timeout=self.timeout
                ) as client:
                    response = await client.get(self.url, params=params)
            except (httpx.TimeoutException, httpx.NetworkError) as e:
                logfire.error("Steam profile request failed", error=str(e))
                raise NetworkFailureError(f"HTTP error fetching profile: {e}") from e
            except httpx.HTTPError as e:
                logfire.error("Steam profile HTTP error", error=str(e))
                raise ProfileUnavailableError(f"HTTP error fetching profile: {e}") from e

            if response.status_code != 200:
                logfire.error(
                    "Steam profile request failed",
                    status_code=response.status_code,
                )
                raise ProfileUnavailableError(
                    f"Profile request failed: {response.status_code}"
                )

            try:
                players = response.json()["response"]["players"]
                player = players[0]
                profile = SteamProfile(
                    steam_id=SteamId(player["steamid"]),
                    persona_name=player["personaname"],
                    avatar_url=player.get("avatarfull"),
                    profile_url=player.get("profileurl"),
                )
            except (ValueError, KeyError, IndexError, TypeError) as e:
                logfire.warn(
                    "Steam returned no usable profile",
                    external_id=external_id.root,
                    error=str(e),
                )
                raise ProfileUnavailableError("No profile for Steam ID") from e

            logfire.info(
                "Steam profile fetched",
                external_id=external_id.root,
                persona_name=profile.persona_name,
            )
            return profile


class MockSteamProfileClient(SteamProfileClient):
    """Mock Steam profile client for testing.

    Returns deterministic profiles; Steam IDs can be registered with custom
    profiles or marked unavailable.
    """

    def __init__(self) -> None:
        self._profiles: dict[str, SteamProfile] = {}
        self._unavailable: set[str] = set()

    def register(self, profile: SteamProfile) -> None:
        self._profiles[profile.steam_id.root] = profile

    def mark_unavailable(self, external_id: SteamId) -> None:
        self._unavailable.add(external_id.root)

    async def fetch(self, external_id: SteamId) -> SteamProfile:
        if external_id.root in self._unavailable:
            raise ProfileUnavailableError("No profile for Steam ID")

        if external_id.root in self._profiles:
            return self._profiles[external_id.root]

        return SteamProfile(
            steam_id=external_id,
            persona_name=f"Mock Player {external_id.root[-4:]}",
            avatar_url="https://example.com/avatar.jpg",
            profile_url=f"https://steamcommunity.com/profiles/{external_id.root}/",
        )
