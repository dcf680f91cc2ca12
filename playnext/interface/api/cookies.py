"""Session cookie helpers shared by the auth routes."""

from starlette.responses import Response

from playnext.config import Settings
from playnext.domain.value import SessionCredential


def set_session_cookie(
    response: Response, session: SessionCredential, settings: Settings
) -> None:
    """Attach the session token as an HTTP-only cookie.

    Args:
        response: Outgoing response
        session: Issued session credential
        settings: Application settings
    """
    response.set_cookie(
        key=settings.auth.session_cookie,
        value=session.token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        domain=settings.auth.cookie_domain,
        path="/",
        max_age=settings.auth.jwt_expiry_days * 24 * 60 * 60,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Delete the session cookie with the same domain/path it was set with."""
    response.delete_cookie(
        key=settings.auth.session_cookie,
        domain=settings.auth.cookie_domain,
        path="/",
    )
