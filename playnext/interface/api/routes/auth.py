"""Session routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from playnext.application.usecase.auth import GetCurrentUserUseCase
from playnext.application.usecase.auth.get_current_user import (
    GetCurrentUserRequest,
    GetCurrentUserResponse,
)
from playnext.config import Settings
from playnext.domain.error import NotFoundError
from playnext.interface.api.cookies import clear_session_cookie
from playnext.util.jwt import JWTError

router = APIRouter(prefix="/auth", tags=["authentication"], route_class=DishkaRoute)


class LogoutResponse(BaseModel):
    """Logout response."""

    success: bool
    message: str


class AuthStatusResponse(BaseModel):
    """Response for checking authentication status.

    Used by /auth/me to return current user if authenticated,
    or indicate unauthenticated state without raising an error.
    """

    authenticated: bool
    user: GetCurrentUserResponse | None = None


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    response: Response,
    settings: FromDishka[Settings],
) -> LogoutResponse:
    """Logout user by clearing the session cookie.

    Args:
        response: FastAPI response object
        settings: Application settings from DI

    Returns:
        Logout success message
    """
    clear_session_cookie(response, settings)
    return LogoutResponse(success=True, message="Successfully logged out")


@router.get("/me", response_model=AuthStatusResponse)
async def get_current_user(
    request: Request,
    get_current_user_use_case: FromDishka[GetCurrentUserUseCase],
    settings: FromDishka[Settings],
) -> AuthStatusResponse:
    """Get current user if authenticated, or return unauthenticated status.

    This endpoint is safe to call without authentication - it will return
    authenticated=false instead of raising an error.

    Examples:
        Authenticated:
        {
            "authenticated": true,
            "user": {
                "user_id": "...",
                "display_name": "gabe",
                "steam_id": "76561197960287930",
                ...
            }
        }

        Unauthenticated:
        {
            "authenticated": false,
            "user": null
        }
    """
    auth_token = request.cookies.get(settings.auth.session_cookie)
    if not auth_token:
        return AuthStatusResponse(authenticated=False)

    try:
        user = await get_current_user_use_case.execute(
            GetCurrentUserRequest(token=auth_token)
        )
        return AuthStatusResponse(authenticated=True, user=user)

    except JWTError:
        # Invalid or expired token - this is expected behavior, not an error
        return AuthStatusResponse(authenticated=False)
    except NotFoundError:
        # JWT valid but user no longer in the directory (orphaned token)
        return AuthStatusResponse(authenticated=False)
