# (c) Copyright Datacraft, 2026
import logging

from fastapi import Request, Depends, HTTPException, status
from fastapi.security.utils import get_authorization_scheme_param
import jwt

from .config import Settings, get_settings
from .schema import TokenData, User

logger = logging.getLogger(__name__)


def from_header(request: Request) -> str | None:
    authorization = request.headers.get("Authorization")
    scheme, token = get_authorization_scheme_param(authorization)

    if not authorization or scheme.lower() != "bearer":
        return None

    return token


def from_cookie(request: Request, settings: Settings) -> str | None:
    return request.cookies.get(settings.cookie_name, None)


def get_token(request: Request, settings: Settings) -> str | None:
    return from_cookie(request, settings) or from_header(request)


def decode_user(token: str, settings: Settings) -> User:
    """Build the user from the identity token issued by the host.

    Raises:
        jwt.InvalidTokenError: signature, expiry or payload is invalid
    """
    payload = jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.token_algorithm.value],
    )
    try:
        return TokenData(**payload).to_user()
    except ValueError as e:
        raise jwt.InvalidTokenError(str(e)) from e


def get_current_user(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> User | None:
    """Current user, None for guests."""
    token = get_token(request, settings)

    if not token:
        return None

    try:
        return decode_user(token, settings)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )


def require_user(user: User | None = Depends(get_current_user)) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
