"""User domain service."""

import logfire

from playnext.domain.error import BusinessRuleViolationError, NotFoundError
from playnext.domain.model.user import DirectoryUser
from playnext.domain.repository.user_directory import UserDirectory
from playnext.domain.value import UserId

from .base import Service


class UserService(Service):
    """Domain service for user operations."""

    def __init__(self, user_directory: UserDirectory) -> None:
        """Initialize user service.

        Args:
            user_directory: User directory
        """
        self.user_directory = user_directory

    async def get_by_id(self, user_id: UserId) -> DirectoryUser:
        """Get user by ID.

        Args:
            user_id: User ID

        Returns:
            Directory user

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("user_service.get_by_id", user_id=str(user_id)):
            user = await self.user_directory.find_by_id(user_id)
            if not user:
                logfire.warn("User not found", user_id=str(user_id))
                raise NotFoundError("User", str(user_id))
            return user

    async def unlink_steam(self, user_id: UserId) -> DirectoryUser:
        """Detach the Steam identity from a user.

        Accounts created through Steam have no other way to sign in, so
        they cannot be unlinked.

        Args:
            user_id: User ID

        Returns:
            The updated user

        Raises:
            NotFoundError: If user not found
            BusinessRuleViolationError: If the account is not linked, or
                Steam is its only sign-in method
        """
        with logfire.span("user_service.unlink_steam", user_id=str(user_id)):
            user = await self.get_by_id(user_id)

            if not user.is_linked:
                raise BusinessRuleViolationError("No Steam account is linked")

            if not user.email:
                logfire.warn(
                    "Refusing to unlink Steam-only account",
                    user_id=str(user_id),
                    external_id=user.external_id.root,
                )
                raise BusinessRuleViolationError(
                    "Cannot unlink Steam from an account created with Steam"
                )

            updated = await self.user_directory.detach_external_id(user_id)
            logfire.info(
                "Steam account unlinked",
                user_id=str(user_id),
                external_id=user.external_id.root,
            )
            return updated
