"""Test configuration and fixtures."""

import pytest

from playnext.config import AuthSettings
from tests.factories import CALLBACK_URL, FrozenClock


@pytest.fixture
def auth_settings() -> AuthSettings:
    """Auth settings with fixed test secrets."""
    return AuthSettings(
        jwt_secret="test-jwt-secret-with-enough-length-for-hs256",
        credential_secret="test-credential-secret",
        steam_callback_url=CALLBACK_URL,
        steam_realm="http://localhost:8000",
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()
