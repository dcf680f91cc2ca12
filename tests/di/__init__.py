"""Mock providers for testing."""

from .persistence import MockPersistenceProvider
from .steam import MockSteamProvider
from .container import build_test_container

__all__ = [
    "MockPersistenceProvider",
    "MockSteamProvider",
    "build_test_container",
]
