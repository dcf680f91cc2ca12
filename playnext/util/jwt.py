"""JWT token utilities."""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from pydantic import BaseModel

from playnext.config import AuthSettings


class TokenPayload(BaseModel):
    """Session token payload."""

    user_id: str
    external_id: str | None = None
    display_name: str | None = None
    exp: datetime


class JWTError(Exception):
    """JWT-related error."""

    pass


def create_token(
    user_id: str,
    external_id: str | None,
    display_name: str | None,
    settings: AuthSettings,
    now: datetime | None = None,
) -> tuple[str, datetime]:
    """Create a session token for the user.

    Args:
        user_id: Directory user ID
        external_id: Linked SteamID64, if any
        display_name: Display name for the frontend
        settings: Authentication settings
        now: Issue time (defaults to the current time)

    Returns:
        Encoded JWT token and its expiry
    """
    issued_at = now or datetime.now(timezone.utc)
    expiry = issued_at + timedelta(days=settings.jwt_expiry_days)

    payload = {
        "user_id": user_id,
        "external_id": external_id,
        "display_name": display_name,
        "exp": expiry,
    }

    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    return token, expiry


def verify_token(token: str, settings: AuthSettings) -> TokenPayload:
    """Verify and decode a session token.

    Tokens carrying an audience (such as sealed link state) are rejected.

    Args:
        token: JWT token to verify
        settings: Authentication settings

    Returns:
        Token payload if valid

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "user_id"]},
        )
        return TokenPayload(**payload)
    except jwt.ExpiredSignatureError:
        raise JWTError("Token has expired")
    except jwt.InvalidTokenError:
        raise JWTError("Invalid token")


def seal_claims(claims: dict[str, Any], audience: str, settings: AuthSettings) -> str:
    """Sign arbitrary claims for a single audience.

    Args:
        claims: Claims to sign
        audience: Audience the claims are valid for
        settings: Authentication settings

    Returns:
        Encoded JWT
    """
    return jwt.encode(
        {**claims, "aud": audience},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def unseal_claims(token: str, audience: str, settings: AuthSettings) -> dict[str, Any]:
    """Verify a token produced by seal_claims.

    Expiry is not checked here; callers own their own clock.

    Raises:
        JWTError: If the signature or audience is invalid
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=audience,
            options={"verify_exp": False},
        )
    except jwt.InvalidTokenError:
        raise JWTError("Invalid sealed token")
