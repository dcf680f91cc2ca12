"""Get Steam link status use case."""

from uuid import UUID

from pydantic import BaseModel

from playnext.application.usecase.base import BaseUseCase
from playnext.domain.service import UserService
from playnext.domain.value import UserId


class GetLinkStatusRequest(BaseModel):
    """Get link status request."""

    user_id: str


class GetLinkStatusResponse(BaseModel):
    """Steam link status of the current user."""

    linked: bool
    steam_id: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None


class GetLinkStatusUseCase(BaseUseCase):
    """Use case for reporting whether the current user has Steam linked."""

    def __init__(self, user_service: UserService) -> None:
        self.user_service = user_service

    async def execute(self, request: GetLinkStatusRequest) -> GetLinkStatusResponse:
        """Raises NotFoundError if the user no longer exists."""
        user = await self.user_service.get_by_id(UserId(UUID(request.user_id)))
        if not user.is_linked:
            return GetLinkStatusResponse(linked=False)

        return GetLinkStatusResponse(
            linked=True,
            steam_id=user.external_id.root,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
        )
