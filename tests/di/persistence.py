"""Mock persistence providers for testing."""

from dishka import Scope, provide

from playnext.domain.repository import UserDirectory
from playnext.persistence.repository.inmemory import InMemoryUserDirectory
from playnext.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using an in-memory directory.

    APP scope so directory state survives across requests of one container;
    each test builds its own container, which keeps tests isolated.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_in_memory_user_directory(self) -> InMemoryUserDirectory:
        """Provide in-memory user directory (exposed so tests can seed users)."""
        return InMemoryUserDirectory()

    @provide(scope=Scope.APP)
    def get_user_directory(self, directory: InMemoryUserDirectory) -> UserDirectory:
        """Provide user directory."""
        return directory
