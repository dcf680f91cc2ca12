"""Steam OpenID 2.0 client implementation.

Steam only speaks stateless OpenID 2.0: there is no association step, so
every positive assertion is confirmed by posting it back to Steam with
mode=check_authentication. Only the claimed_id of a confirmed assertion is
trusted.
"""

import asyncio
import re
from collections.abc import Mapping
from urllib.parse import parse_qs, urlencode, urlsplit

import httpx
import logfire

from playnext.config import SteamSettings
from playnext.domain.error import (
    MalformedAssertionError,
    NetworkFailureError,
    ProviderRejectedError,
)
from playnext.domain.service.steam_auth_service import SteamOpenIDClient
from playnext.domain.value import SteamId, VerifiedAssertion

OPENID_NS = "http://specs.openid.net/auth/2.0"
IDENTIFIER_SELECT = "http://specs.openid.net/auth/2.0/identifier_select"

CLAIMED_ID_PATTERN = re.compile(r"^https?://steamcommunity\.com/openid/id/(\d{17})$")

REQUIRED_PARAMS = (
    "openid.ns",
    "openid.mode",
    "openid.op_endpoint",
    "openid.claimed_id",
    "openid.identity",
    "openid.return_to",
    "openid.response_nonce",
    "openid.assoc_handle",
    "openid.signed",
    "openid.sig",
)

# Fields a positive assertion must sign for the claimed identity to be bound
REQUIRED_SIGNED_FIELDS = frozenset(
    {"claimed_id", "identity", "return_to", "response_nonce", "op_endpoint"}
)


def parse_key_value_form(body: str) -> dict[str, str]:
    """Parse an OpenID Key-Value Form document.

    Each line is "key:value"; lines without a colon are ignored.

    Args:
        body: Response body

    Returns:
        Parsed fields
    """
    fields: dict[str, str] = {}
    for line in body.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        fields[key.strip()] = value.strip()
    return fields


def extract_claimed_steam_id(claimed_id: str | None) -> SteamId:
    """Extract the SteamID64 from a Steam claimed_id URL.

    Raises:
        MalformedAssertionError: If the URL is not a Steam identity URL
    """
    match = CLAIMED_ID_PATTERN.match(claimed_id or "")
    if not match:
        raise MalformedAssertionError("claimed_id is not a Steam identity URL")
    return SteamId(match.group(1))


class RealSteamOpenIDClient(SteamOpenIDClient):
    """Steam OpenID 2.0 client with direct verification."""

    def __init__(
        self,
        settings: SteamSettings,
        return_endpoint: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize Steam OpenID client.

        Args:
            settings: Steam settings (endpoint, timeout, retry backoff)
            return_endpoint: Callback URL assertions must return to
            transport: Optional httpx transport (for tests)
        """
        self.endpoint = settings.openid_endpoint
        self.timeout = settings.request_timeout_seconds
        self.retry_backoff = settings.verify_retry_backoff_seconds
        self.return_endpoint = return_endpoint
        self._transport = transport

    def build_authorization_request(
        self, state_token: str, return_endpoint: str, realm: str
    ) -> str:
        """Build the checkid_setup redirect URL.

        Args:
            state_token: Anti-forgery token, carried in return_to
            return_endpoint: Callback URL
            realm: Realm shown to the user

        Returns:
            Steam login URL
        """
        return_to = f"{return_endpoint}?{urlencode({'state': state_token})}"
        params = {
            "openid.ns": OPENID_NS,
            "openid.mode": "checkid_setup",
            "openid.return_to": return_to,
            "openid.realm": realm,
            "openid.identity": IDENTIFIER_SELECT,
            "openid.claimed_id": IDENTIFIER_SELECT,
        }

        logfire.info(
            "Steam OpenID authorization initiated",
            return_endpoint=return_endpoint,
            realm=realm,
        )

        return f"{self.endpoint}?{urlencode(params)}"

    async def verify_assertion(self, params: Mapping[str, str]) -> VerifiedAssertion:
        """Check the assertion locally, then confirm it with Steam.

        Args:
            params: All callback query parameters

        Returns:
            Verified assertion

        Raises:
            ProviderRejectedError: User cancelled or Steam did not confirm
            MalformedAssertionError: Parameters fail structural checks
            NetworkFailureError: Steam unreachable after one retry
        """
        with logfire.span("steam_openid.verify_assertion"):
            external_id = self._check_structure(params)

            openid_params = {k: v for k, v in params.items() if k.startswith("openid.")}
            openid_params["openid.mode"] = "check_authentication"

            body = await self._post_with_retry(openid_params)
            fields = parse_key_value_form(body)

            if fields.get("ns") != OPENID_NS or fields.get("is_valid") != "true":
                logfire.warn(
                    "Steam rejected assertion",
                    external_id=external_id.root,
                    is_valid=fields.get("is_valid"),
                )
                raise ProviderRejectedError("Steam did not confirm the assertion")

            logfire.info("Steam assertion verified", external_id=external_id.root)
            return VerifiedAssertion(
                external_id=external_id, claimed_id=params["openid.claimed_id"]
            )

    def _check_structure(self, params: Mapping[str, str]) -> SteamId:
        mode = params.get("openid.mode")
        if mode == "cancel":
            logfire.info("Steam login cancelled by user")
            raise ProviderRejectedError("Steam login was cancelled")
        if mode != "id_res":
            raise MalformedAssertionError(f"Unexpected openid.mode: {mode}")

        missing = [name for name in REQUIRED_PARAMS if not params.get(name)]
        if missing:
            logfire.warn("Steam assertion missing parameters", missing=missing)
            raise MalformedAssertionError(f"Missing parameters: {', '.join(missing)}")

        if params["openid.ns"] != OPENID_NS:
            raise MalformedAssertionError("Unexpected openid.ns")

        if params["openid.op_endpoint"] != self.endpoint:
            logfire.warn(
                "Steam assertion from unexpected endpoint",
                op_endpoint=params["openid.op_endpoint"],
            )
            raise MalformedAssertionError("Unexpected openid.op_endpoint")

        return_to = params["openid.return_to"]
        if not self._return_to_matches(return_to, params.get("state")):
            logfire.warn("Steam assertion for another return_to", return_to=return_to)
            raise MalformedAssertionError("openid.return_to does not match")

        if params["openid.identity"] != params["openid.claimed_id"]:
            raise MalformedAssertionError("openid.identity differs from claimed_id")

        signed = set(params["openid.signed"].split(","))
        if not REQUIRED_SIGNED_FIELDS <= signed:
            raise MalformedAssertionError("Assertion does not sign required fields")

        return extract_claimed_steam_id(params["openid.claimed_id"])

    def _return_to_matches(self, return_to: str, state: str | None) -> bool:
        """Check return_to is our callback and carries the callback's own state."""
        expected = urlsplit(self.return_endpoint)
        actual = urlsplit(return_to)
        if (actual.scheme, actual.netloc, actual.path) != (
            expected.scheme,
            expected.netloc,
            expected.path,
        ):
            return False
        return bool(state) and parse_qs(actual.query).get("state") == [state]

    async def _post_with_retry(self, data: dict[str, str]) -> str:
        """POST to Steam, retrying once on a network failure."""
        try:
            return await self._post(data)
        except NetworkFailureError as e:
            logfire.warn(
                "Steam verification failed, retrying once",
                error=str(e),
                backoff_seconds=self.retry_backoff,
            )
            await asyncio.sleep(self.retry_backoff)
            return await self._post(data)

    async def _post(self, data: dict[str, str]) -> str:
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.timeout
            ) as client:
                response = await client.post(
                    self.endpoint,
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as e:
            logfire.error("Steam verification HTTP error", error=str(e))
            raise NetworkFailureError(f"HTTP error during verification: {e}") from e

        if response.status_code >= 500:
            logfire.error(
                "Steam verification server error", status_code=response.status_code
            )
            raise NetworkFailureError(f"Steam returned {response.status_code}")

        if response.status_code != 200:
            logfire.error(
                "Steam verification request failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise ProviderRejectedError(f"Steam returned {response.status_code}")

        return response.text


class MockSteamOpenIDClient(SteamOpenIDClient):
    """Mock Steam OpenID client for testing.

    Accepts any assertion with a well-formed Steam claimed_id without
    contacting Steam. Cancellation is still honoured.
    """

    def __init__(self, endpoint: str = "https://steamcommunity.com/openid/login"):
        """Initialize mock client without network access."""
        self.endpoint = endpoint

    def build_authorization_request(
        self, state_token: str, return_endpoint: str, realm: str
    ) -> str:
        """Return a mock login URL carrying the state."""
        return_to = f"{return_endpoint}?{urlencode({'state': state_token})}"
        params = {"openid.return_to": return_to, "openid.realm": realm, "mock": "true"}
        return f"{self.endpoint}?{urlencode(params)}"

    async def verify_assertion(self, params: Mapping[str, str]) -> VerifiedAssertion:
        """Return the claimed identity if it is a Steam identity URL."""
        if params.get("openid.mode") == "cancel":
            raise ProviderRejectedError("Steam login was cancelled")

        claimed_id = params.get("openid.claimed_id")
        external_id = extract_claimed_steam_id(claimed_id)
        return VerifiedAssertion(external_id=external_id, claimed_id=claimed_id)
