"""User directory repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from playnext.domain.model.user import DirectoryUser
from playnext.domain.value import ExternalIdentity, SteamId, UserId


class UserDirectory(ABC):
    """Repository for DirectoryUser aggregate.

    Implementations must enforce uniqueness of external_id and report a
    violation as DuplicateExternalIdError rather than a raw storage error.
    """

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[DirectoryUser]:
        """Find a user by ID.

        Args:
            user_id: The user's unique identifier

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_external_id(
        self, external_id: SteamId
    ) -> Optional[DirectoryUser]:
        """Find the user that claims a Steam ID.

        Args:
            external_id: SteamID64

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def create_with_external_id(
        self, identity: ExternalIdentity, secret: str
    ) -> DirectoryUser:
        """Create a user owning the given Steam identity.

        Args:
            identity: Verified Steam identity and profile fields
            secret: Directory secret the user will authenticate with

        Returns:
            The created user

        Raises:
            DuplicateExternalIdError: If another user already claims the Steam ID
        """
        pass

    @abstractmethod
    async def attach_external_id(
        self, user_id: UserId, identity: ExternalIdentity, secret: str
    ) -> DirectoryUser:
        """Attach a Steam identity and its profile fields to an existing user.

        The secret replaces any previous Steam credential, so the user can
        afterwards sign in with the newly attached Steam ID.

        Args:
            user_id: User to attach to
            identity: Verified Steam identity
            secret: Directory secret derived for the Steam ID

        Returns:
            The updated user

        Raises:
            NotFoundError: If the user does not exist
            DuplicateExternalIdError: If another user already claims the Steam ID
        """
        pass

    @abstractmethod
    async def detach_external_id(self, user_id: UserId) -> DirectoryUser:
        """Remove the Steam identity and its credential from a user.

        Raises:
            NotFoundError: If the user does not exist
        """
        pass

    @abstractmethod
    async def authenticate(self, user_id: UserId, secret: str) -> DirectoryUser:
        """Authenticate a user with its directory secret.

        Args:
            user_id: User to authenticate
            secret: Directory secret

        Returns:
            The authenticated user

        Raises:
            DirectoryAuthenticationError: If the user is unknown or the secret is wrong
        """
        pass
