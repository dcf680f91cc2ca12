"""Unit tests for the Steam OpenID 2.0 client."""

from urllib.parse import parse_qs, parse_qsl, urlparse

import httpx
import pytest

from playnext.adapter.steam import MockSteamOpenIDClient, RealSteamOpenIDClient
from playnext.adapter.steam.openid import (
    IDENTIFIER_SELECT,
    OPENID_NS,
    parse_key_value_form,
)
from playnext.config import SteamSettings
from playnext.domain.error import (
    MalformedAssertionError,
    NetworkFailureError,
    ProviderRejectedError,
)
from tests.factories import CALLBACK_URL, STEAM_ID_A, make_assertion_params

VALID_RESPONSE = f"ns:{OPENID_NS}\nis_valid:true\n"


class RecordingHandler:
    """httpx.MockTransport handler that replays canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def posted(self, index: int = 0) -> dict[str, list[str]]:
        return parse_qs(self.requests[index].content.decode())


def make_client(handler: RecordingHandler) -> RealSteamOpenIDClient:
    """Helper to build a client wired to a mock transport."""
    return RealSteamOpenIDClient(
        settings=SteamSettings(verify_retry_backoff_seconds=0),
        return_endpoint=CALLBACK_URL,
        transport=httpx.MockTransport(handler),
    )


class TestParseKeyValueForm:
    """Tests for parse_key_value_form()."""

    def test_parses_lines(self):
        assert parse_key_value_form("ns:http://x\nis_valid:true\n") == {
            "ns": "http://x",
            "is_valid": "true",
        }

    def test_splits_on_first_colon_only(self):
        """Values may contain colons; keys may not."""
        fields = parse_key_value_form("foo:is_valid:true\n")

        assert fields == {"foo": "is_valid:true"}
        assert "is_valid" not in fields


class TestBuildAuthorizationRequest:
    """Tests for RealSteamOpenIDClient.build_authorization_request()."""

    def test_builds_checkid_setup_url(self):
        client = make_client(RecordingHandler())

        url = client.build_authorization_request(
            "abc123", CALLBACK_URL, "http://localhost:8000"
        )

        parsed = urlparse(url)
        params = dict(parse_qsl(parsed.query))
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == (
            "https://steamcommunity.com/openid/login"
        )
        assert params["openid.ns"] == OPENID_NS
        assert params["openid.mode"] == "checkid_setup"
        assert params["openid.return_to"] == f"{CALLBACK_URL}?state=abc123"
        assert params["openid.realm"] == "http://localhost:8000"
        assert params["openid.identity"] == IDENTIFIER_SELECT
        assert params["openid.claimed_id"] == IDENTIFIER_SELECT


class TestVerifyAssertion:
    """Tests for RealSteamOpenIDClient.verify_assertion()."""

    @pytest.mark.asyncio
    async def test_accepts_confirmed_assertion(self):
        """Should return the claimed Steam ID when Steam confirms."""
        # Arrange
        handler = RecordingHandler(httpx.Response(200, text=VALID_RESPONSE))
        client = make_client(handler)

        # Act
        assertion = await client.verify_assertion(make_assertion_params())

        # Assert
        assert assertion.external_id.root == STEAM_ID_A
        assert assertion.claimed_id.endswith(STEAM_ID_A)

    @pytest.mark.asyncio
    async def test_posts_check_authentication(self):
        """Should echo the openid.* params back with mode=check_authentication."""
        handler = RecordingHandler(httpx.Response(200, text=VALID_RESPONSE))
        client = make_client(handler)
        params = make_assertion_params()

        await client.verify_assertion(params)

        request = handler.requests[0]
        posted = handler.posted()
        assert request.method == "POST"
        assert str(request.url) == "https://steamcommunity.com/openid/login"
        assert posted["openid.mode"] == ["check_authentication"]
        assert posted["openid.sig"] == [params["openid.sig"]]
        assert posted["openid.signed"] == [params["openid.signed"]]
        assert "state" not in posted

    @pytest.mark.asyncio
    async def test_rejects_is_valid_false(self):
        handler = RecordingHandler(
            httpx.Response(200, text=f"ns:{OPENID_NS}\nis_valid:false\n")
        )

        with pytest.raises(ProviderRejectedError):
            await make_client(handler).verify_assertion(make_assertion_params())

    @pytest.mark.parametrize(
        "body",
        [
            f"ns:{OPENID_NS}\nfoo:is_valid:true\n",
            f"ns:{OPENID_NS}\nerror:is_valid:true\n",
            f"ns:{OPENID_NS}\nis_valid:true_ish\n",
            "is_valid:true\n",
            "",
        ],
    )
    @pytest.mark.asyncio
    async def test_requires_exact_is_valid_field(self, body):
        """is_valid:true elsewhere in the body must not count as confirmation."""
        handler = RecordingHandler(httpx.Response(200, text=body))

        with pytest.raises(ProviderRejectedError):
            await make_client(handler).verify_assertion(make_assertion_params())

    @pytest.mark.asyncio
    async def test_cancel_is_provider_rejected(self):
        """Should not contact Steam when the user cancelled."""
        handler = RecordingHandler()
        params = {"openid.ns": OPENID_NS, "openid.mode": "cancel", "state": "s"}

        with pytest.raises(ProviderRejectedError):
            await make_client(handler).verify_assertion(params)

        assert handler.requests == []

    @pytest.mark.parametrize(
        "override",
        [
            {"openid.mode": "checkid_setup"},
            {"openid.ns": "http://openid.net/signon/1.1"},
            {"openid.op_endpoint": "https://evil.example/openid/login"},
            {"openid.return_to": "https://evil.example/callback?state=state-token"},
            {"openid.return_to": f"{CALLBACK_URL}XYZ?state=state-token"},
            {"openid.return_to": f"{CALLBACK_URL}?state=other-token"},
            {"state": "other-token"},
            {
                "openid.claimed_id": "https://evil.example/openid/id/76561197960287930",
                "openid.identity": "https://evil.example/openid/id/76561197960287930",
            },
            {
                "openid.claimed_id": "https://steamcommunity.com/openid/id/123",
                "openid.identity": "https://steamcommunity.com/openid/id/123",
            },
            {"openid.identity": "https://steamcommunity.com/openid/id/76561198000000001"},
            {"openid.signed": "signed,op_endpoint,return_to,response_nonce"},
            {"openid.sig": ""},
        ],
    )
    @pytest.mark.asyncio
    async def test_rejects_malformed_assertion(self, override):
        """Structural failures should be rejected before contacting Steam."""
        handler = RecordingHandler()
        params = {**make_assertion_params(), **override}

        with pytest.raises(MalformedAssertionError):
            await make_client(handler).verify_assertion(params)

        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_return_to_without_callback_state_is_malformed(self):
        """return_to must carry the same state the callback was delivered with."""
        params = make_assertion_params()
        del params["state"]

        with pytest.raises(MalformedAssertionError):
            await make_client(RecordingHandler()).verify_assertion(params)

    @pytest.mark.asyncio
    async def test_missing_parameter_is_malformed(self):
        params = make_assertion_params()
        del params["openid.response_nonce"]

        with pytest.raises(MalformedAssertionError):
            await make_client(RecordingHandler()).verify_assertion(params)

    @pytest.mark.asyncio
    async def test_retries_network_failure_once(self):
        """A transient failure should be retried exactly once."""
        # Arrange
        handler = RecordingHandler(
            httpx.ConnectError("connection refused"),
            httpx.Response(200, text=VALID_RESPONSE),
        )

        # Act
        assertion = await make_client(handler).verify_assertion(make_assertion_params())

        # Assert
        assert assertion.external_id.root == STEAM_ID_A
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_second_failure(self):
        handler = RecordingHandler(
            httpx.ConnectError("connection refused"),
            httpx.Response(503, text="unavailable"),
        )

        with pytest.raises(NetworkFailureError):
            await make_client(handler).verify_assertion(make_assertion_params())

        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        handler = RecordingHandler(httpx.Response(403, text="forbidden"))

        with pytest.raises(ProviderRejectedError):
            await make_client(handler).verify_assertion(make_assertion_params())

        assert len(handler.requests) == 1


class TestMockSteamOpenIDClient:
    """Tests for MockSteamOpenIDClient."""

    @pytest.mark.asyncio
    async def test_accepts_steam_identity(self):
        assertion = await MockSteamOpenIDClient().verify_assertion(
            make_assertion_params()
        )

        assert assertion.external_id.root == STEAM_ID_A

    @pytest.mark.asyncio
    async def test_honours_cancel(self):
        with pytest.raises(ProviderRejectedError):
            await MockSteamOpenIDClient().verify_assertion({"openid.mode": "cancel"})

    def test_login_url_carries_state(self):
        url = MockSteamOpenIDClient().build_authorization_request(
            "abc123", CALLBACK_URL, "http://localhost:8000"
        )

        params = dict(parse_qsl(urlparse(url).query))
        assert params["openid.return_to"] == f"{CALLBACK_URL}?state=abc123"
