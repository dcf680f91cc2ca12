"""Unlink Steam account use case."""

from uuid import UUID

from pydantic import BaseModel

from playnext.application.usecase.base import BaseUseCase
from playnext.domain.service import UserService
from playnext.domain.value import UserId


class UnlinkSteamRequest(BaseModel):
    """Unlink Steam request."""

    user_id: str


class UnlinkSteamResponse(BaseModel):
    """Unlink Steam response."""

    user_id: str
    linked: bool


class UnlinkSteamUseCase(BaseUseCase):
    """Use case for detaching the Steam account from the current user."""

    def __init__(self, user_service: UserService) -> None:
        """Initialize unlink Steam use case.

        Args:
            user_service: User domain service
        """
        self.user_service = user_service

    async def execute(self, request: UnlinkSteamRequest) -> UnlinkSteamResponse:
        """Execute unlink flow.

        Raises:
            NotFoundError: If user not found
            BusinessRuleViolationError: If the account cannot be unlinked
        """
        user = await self.user_service.unlink_steam(UserId(UUID(request.user_id)))
        return UnlinkSteamResponse(user_id=str(user.id), linked=user.is_linked)
