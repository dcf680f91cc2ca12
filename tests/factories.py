"""Shared test data builders."""

from datetime import datetime, timezone

from playnext.domain.value import ExternalIdentity, SteamId

STEAM_OPENID_ENDPOINT = "https://steamcommunity.com/openid/login"
CALLBACK_URL = "http://localhost:8000/auth/external/callback"

STEAM_ID_A = "76561197960287930"
STEAM_ID_B = "76561198000000001"


def make_identity(steam_id: str = STEAM_ID_A, name: str = "gabe") -> ExternalIdentity:
    """Helper to build a verified Steam identity for tests."""
    return ExternalIdentity(
        external_id=SteamId(steam_id),
        display_name=name,
        avatar_url=f"https://avatars.steamstatic.com/{steam_id}_full.jpg",
    )


def make_assertion_params(
    steam_id: str = STEAM_ID_A,
    state: str | None = "state-token",
    return_endpoint: str = CALLBACK_URL,
) -> dict[str, str]:
    """Helper mimicking the query Steam appends to return_to on success.

    Args:
        steam_id: SteamID64 to claim
        state: LinkState token carried in return_to (omitted if None)
        return_endpoint: Callback URL the assertion returns to

    Returns:
        Callback query parameters
    """
    claimed_id = f"https://steamcommunity.com/openid/id/{steam_id}"
    return_to = f"{return_endpoint}?state={state}" if state else return_endpoint
    params = {
        "openid.ns": "http://specs.openid.net/auth/2.0",
        "openid.mode": "id_res",
        "openid.op_endpoint": STEAM_OPENID_ENDPOINT,
        "openid.claimed_id": claimed_id,
        "openid.identity": claimed_id,
        "openid.return_to": return_to,
        "openid.response_nonce": "2026-10-19T10:00:00Zabc123",
        "openid.assoc_handle": "1234567890",
        "openid.signed": "signed,op_endpoint,claimed_id,identity,return_to,response_nonce,assoc_handle",
        "openid.sig": "W0u5DRbtHE1GG0ZKXjerUZDUGmc=",
    }
    if state:
        params["state"] = state
    return params


class FrozenClock:
    """Controllable clock for expiry tests."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now
