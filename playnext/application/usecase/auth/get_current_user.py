"""Get current user use case."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from playnext.application.usecase.base import BaseUseCase
from playnext.domain.service import JWTService, UserService
from playnext.domain.value import UserId


class GetCurrentUserRequest(BaseModel):
    """Get current user request."""

    token: str  # JWT token


class GetCurrentUserResponse(BaseModel):
    """Get current user response."""

    user_id: str
    display_name: str | None
    avatar_url: str | None
    email: str | None
    steam_id: str | None
    total_games: int
    total_playtime: int
    created_at: datetime


class GetCurrentUserUseCase(BaseUseCase):
    """Use case for getting current authenticated user."""

    def __init__(self, jwt_service: JWTService, user_service: UserService) -> None:
        """Initialize get current user use case.

        Args:
            jwt_service: JWT token domain service
            user_service: User domain service
        """
        self.jwt_service = jwt_service
        self.user_service = user_service

    async def execute(self, request: GetCurrentUserRequest) -> GetCurrentUserResponse:
        """Execute get current user flow.

        Steps:
        1. Verify JWT token via JWT service
        2. Load user from the directory
        3. Return user info

        Args:
            request: Request with JWT token

        Returns:
            User information if token is valid and user exists

        Raises:
            JWTError: If token is invalid or expired
            NotFoundError: If user not found
        """
        # Verify token (raises JWTError if invalid)
        payload = self.jwt_service.verify_token(request.token)

        # Load user (raises NotFoundError if not found)
        user = await self.user_service.get_by_id(UserId(UUID(payload.user_id)))

        return GetCurrentUserResponse(
            user_id=str(user.id),
            display_name=user.display_name,
            avatar_url=user.avatar_url,
            email=user.email,
            steam_id=user.external_id.root if user.external_id else None,
            total_games=user.total_games,
            total_playtime=user.total_playtime,
            created_at=user.created_at,
        )
