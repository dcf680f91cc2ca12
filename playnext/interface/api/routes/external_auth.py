"""Steam login and account linking routes."""

from urllib.parse import urlencode

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse

from playnext.adapter.cookie import CookieCredentialSlot
from playnext.application.usecase.auth import (
    CompleteExternalLoginUseCase,
    GetLinkStatusUseCase,
    StartExternalLoginUseCase,
    UnlinkSteamUseCase,
)
from playnext.application.usecase.auth.complete_external_login import (
    CompleteExternalLoginRequest,
    CompleteExternalLoginResponse,
)
from playnext.application.usecase.auth.get_link_status import (
    GetLinkStatusRequest,
    GetLinkStatusResponse,
)
from playnext.application.usecase.auth.start_external_login import (
    StartExternalLoginRequest,
)
from playnext.application.usecase.auth.unlink_steam import (
    UnlinkSteamRequest,
    UnlinkSteamResponse,
)
from playnext.config import Settings
from playnext.domain.error import (
    BusinessRuleViolationError,
    ExternalAuthError,
    NotFoundError,
)
from playnext.domain.service import JWTService
from playnext.domain.value import AuthenticatedContext, LinkMode
from playnext.interface.api.cookies import set_session_cookie
from playnext.util.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/auth/external", tags=["external-auth"], route_class=DishkaRoute
)

UNEXPECTED_ERROR_CODE = "unexpected"
INVALID_MODE_ERROR_CODE = "invalid_mode"


def _caller_context(
    request: Request, jwt_service: JWTService, settings: Settings
) -> AuthenticatedContext:
    return jwt_service.context_from_token(
        request.cookies.get(settings.auth.session_cookie)
    )


def _error_redirect(settings: Settings, code: str, mode: str | None) -> RedirectResponse:
    """Redirect to the frontend page that explains an error code."""
    path = (
        settings.auth.link_error_path
        if mode == LinkMode.LINK.value
        else settings.auth.login_error_path
    )
    return RedirectResponse(
        url=f"{settings.api.frontend_url}{path}?{urlencode({'error': code})}",
        status_code=status.HTTP_302_FOUND,
    )


def _success_url(settings: Settings, result: CompleteExternalLoginResponse) -> str:
    url = f"{settings.api.frontend_url}{result.return_to}"
    if result.notice:
        separator = "&" if "?" in result.return_to else "?"
        url = f"{url}{separator}{urlencode({'notice': result.notice})}"
    return url


def _require_session(
    request: Request, jwt_service: JWTService, settings: Settings
) -> AuthenticatedContext:
    context = _caller_context(request, jwt_service, settings)
    if not context.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return context


@router.get("/start")
async def start_external_login(
    request: Request,
    start_use_case: FromDishka[StartExternalLoginUseCase],
    jwt_service: FromDishka[JWTService],
    settings: FromDishka[Settings],
    mode: str = LinkMode.LOGIN.value,
    return_to: str | None = Query(default=None, alias="returnTo"),
):
    """Redirect the caller to Steam to sign in or link an account.

    Args:
        request: Incoming request (cookies)
        start_use_case: Start external login use case from DI
        jwt_service: JWT service from DI
        settings: Application settings from DI
        mode: "login" or "link" (link requires a session); anything else
            redirects to the login page with error=invalid_mode
        return_to: Relative frontend path to land on afterwards

    Returns:
        HTTP 302 redirect to Steam with the link-state cookie set

    Example:
        GET /auth/external/start?mode=link&returnTo=/settings

        Redirects to: https://steamcommunity.com/openid/login?openid.mode=checkid_setup...
        Sets cookie: steam_link_state
    """
    try:
        link_mode = LinkMode(mode)
    except ValueError:
        logger.warning(f"Steam handshake not started: unknown mode={mode!r}")
        return _error_redirect(settings, INVALID_MODE_ERROR_CODE, None)

    slot = CookieCredentialSlot(request.cookies, secure=settings.is_production)
    context = _caller_context(request, jwt_service, settings)

    try:
        result = await start_use_case.execute(
            StartExternalLoginRequest(
                mode=link_mode, return_to=return_to, context=context
            ),
            slot,
        )
        response = RedirectResponse(
            url=result.authorization_url, status_code=status.HTTP_302_FOUND
        )
        logger.info(f"Redirecting to Steam: mode={link_mode.value}")
    except ExternalAuthError as e:
        logger.warning(
            f"Steam handshake not started: mode={link_mode.value}, code={e.code}"
        )
        response = _error_redirect(settings, e.code, link_mode.value)

    slot.apply(response)
    return response


@router.get("/callback")
async def external_callback(
    request: Request,
    complete_use_case: FromDishka[CompleteExternalLoginUseCase],
    jwt_service: FromDishka[JWTService],
    settings: FromDishka[Settings],
):
    """Handle the Steam OpenID callback.

    Verifies the anti-forgery state and the assertion, resolves the Steam
    identity, issues a session cookie and redirects to the frontend. Every
    failure becomes a redirect carrying a stable error code. The link-state
    cookie is cleared on every response.

    Args:
        request: Incoming request (query parameters and cookies)
        complete_use_case: Complete external login use case from DI
        jwt_service: JWT service from DI
        settings: Application settings from DI

    Returns:
        HTTP 302 redirect to the frontend

    Example:
        GET /auth/external/callback?state=...&openid.mode=id_res&openid.claimed_id=...

        Redirects to: https://playthisnext.app/
        Sets cookie: auth_token
        On failure redirects to: https://playthisnext.app/login?error=invalid_state
    """
    slot = CookieCredentialSlot(request.cookies, secure=settings.is_production)
    context = _caller_context(request, jwt_service, settings)
    params = CompleteExternalLoginUseCase.callback_params(request.query_params)

    try:
        result = await complete_use_case.execute(
            CompleteExternalLoginRequest(params=params, context=context), slot
        )
    except ExternalAuthError as e:
        if e.code == "session_issuance_failed":
            logger.error(f"Steam callback failed: code={e.code}, mode={e.mode}")
        else:
            logger.warning(f"Steam callback failed: code={e.code}, mode={e.mode}")
        response = _error_redirect(settings, e.code, e.mode)
    except Exception as e:
        logger.exception(f"Unexpected error during Steam callback: {str(e)}")
        response = _error_redirect(settings, UNEXPECTED_ERROR_CODE, None)
    else:
        response = RedirectResponse(
            url=_success_url(settings, result), status_code=status.HTTP_302_FOUND
        )
        set_session_cookie(response, result.session, settings)
        logger.info(
            f"Steam callback succeeded: outcome={result.outcome.value}, "
            f"user_id={result.user_id}"
        )

    slot.delete(settings.auth.link_state_cookie)
    slot.apply(response)
    return response


@router.get("/status", response_model=GetLinkStatusResponse)
async def get_link_status(
    request: Request,
    link_status_use_case: FromDishka[GetLinkStatusUseCase],
    jwt_service: FromDishka[JWTService],
    settings: FromDishka[Settings],
) -> GetLinkStatusResponse:
    """Report whether the current user has a Steam account linked.

    Example:
        GET /auth/external/status
        Cookie: auth_token=...

        Response:
        {
            "linked": true,
            "steam_id": "76561197960287930",
            "display_name": "gabe",
            "avatar_url": "https://avatars.steamstatic.com/..."
        }
    """
    context = _require_session(request, jwt_service, settings)

    try:
        return await link_status_use_case.execute(
            GetLinkStatusRequest(user_id=str(context.user_id))
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/unlink", response_model=UnlinkSteamResponse)
async def unlink_steam(
    request: Request,
    unlink_use_case: FromDishka[UnlinkSteamUseCase],
    jwt_service: FromDishka[JWTService],
    settings: FromDishka[Settings],
) -> UnlinkSteamResponse:
    """Detach the Steam account from the current user.

    Accounts created through Steam cannot be unlinked (409), since Steam is
    their only way to sign in.
    """
    context = _require_session(request, jwt_service, settings)

    try:
        return await unlink_use_case.execute(
            UnlinkSteamRequest(user_id=str(context.user_id))
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except BusinessRuleViolationError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
