"""Unit tests for StartExternalLoginUseCase."""

from urllib.parse import parse_qsl, urlparse
from uuid import uuid4

import pytest

from playnext.adapter.cookie import InMemoryCredentialSlot
from playnext.adapter.steam import MockSteamOpenIDClient, MockSteamProfileClient
from playnext.application.usecase.auth import StartExternalLoginUseCase
from playnext.application.usecase.auth.start_external_login import (
    StartExternalLoginRequest,
)
from playnext.domain.error import NotAuthenticatedError
from playnext.domain.service import LinkStateService, SteamAuthService
from playnext.domain.value import AuthenticatedContext, LinkMode, UserId


@pytest.fixture
def link_state_service(auth_settings, clock) -> LinkStateService:
    return LinkStateService(auth_settings, clock=clock)


@pytest.fixture
def use_case(auth_settings, link_state_service) -> StartExternalLoginUseCase:
    return StartExternalLoginUseCase(
        link_state_service=link_state_service,
        steam_auth_service=SteamAuthService(
            MockSteamOpenIDClient(), MockSteamProfileClient(), auth_settings
        ),
    )


class TestStartExternalLogin:
    """Tests for StartExternalLoginUseCase.execute()."""

    @pytest.mark.asyncio
    async def test_login_stores_state_and_builds_url(
        self, use_case, link_state_service, auth_settings, clock
    ):
        """The URL should carry the same state the slot holds."""
        # Arrange
        slot = InMemoryCredentialSlot(clock=clock)

        # Act
        result = await use_case.execute(
            StartExternalLoginRequest(mode=LinkMode.LOGIN, return_to="/library"), slot
        )

        # Assert
        params = dict(parse_qsl(urlparse(result.authorization_url).query))
        return_to = urlparse(params["openid.return_to"])
        state_token = dict(parse_qsl(return_to.query))["state"]
        assert params["openid.return_to"].startswith(auth_settings.steam_callback_url)

        state = link_state_service.verify(state_token, slot)
        assert state.mode == LinkMode.LOGIN
        assert state.return_to == "/library"

    @pytest.mark.asyncio
    async def test_unsafe_return_to_is_replaced(self, use_case, link_state_service, clock):
        slot = InMemoryCredentialSlot(clock=clock)

        result = await use_case.execute(
            StartExternalLoginRequest(return_to="https://evil.example/"), slot
        )

        params = dict(parse_qsl(urlparse(result.authorization_url).query))
        state_token = dict(parse_qsl(urlparse(params["openid.return_to"]).query))["state"]
        assert link_state_service.verify(state_token, slot).return_to == "/"

    @pytest.mark.asyncio
    async def test_link_requires_session(self, use_case, link_state_service, clock):
        """Should refuse to start a link for an anonymous caller."""
        slot = InMemoryCredentialSlot(clock=clock)

        with pytest.raises(NotAuthenticatedError) as exc_info:
            await use_case.execute(StartExternalLoginRequest(mode=LinkMode.LINK), slot)

        assert exc_info.value.mode == "link"
        assert slot.get(link_state_service.slot_key) is None

    @pytest.mark.asyncio
    async def test_link_with_session(self, use_case, clock):
        slot = InMemoryCredentialSlot(clock=clock)
        context = AuthenticatedContext(user_id=UserId(uuid4()), token="session")

        result = await use_case.execute(
            StartExternalLoginRequest(mode=LinkMode.LINK, context=context), slot
        )

        assert result.mode == LinkMode.LINK
