# allosports/api/deps.py
from fastapi import Depends, Header, Request, status

from allosports.config import Settings
from allosports.core.errors import api_error
from allosports.core.security import (
    TOKEN_COOKIE_NAME,
    InvalidToken,
    TokenIdentity,
    verify_access_token,
)
from allosports.storage import ROLE_ADMIN, ROLE_AUTHOR, ArticleRecord, Storage


def get_storage(request: Request) -> Storage:
    """The store the app was built with (see create_app)."""
    return request.app.state.storage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> TokenIdentity:
    """
    FastAPI dependency resolving the caller's identity from their token.

    The token is read from:
    1. HttpOnly cookie (token) - what browsers send
    2. Authorization header (Bearer token) - fallback for API clients

    On success the identity is also stored on request.state.user.

    Raises:
        HTTPException (401): If no token is provided (AUTH_REQUIRED)
        HTTPException (401): If token is invalid, malformed or expired (AUTH_INVALID_TOKEN)
    """
    token = request.cookies.get(TOKEN_COOKIE_NAME)
    if not token and authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()

    if not token:
        raise api_error(status.HTTP_401_UNAUTHORIZED, "AUTH_REQUIRED", "Authentication required")

    try:
        identity = verify_access_token(token, get_settings(request))
    except InvalidToken:
        raise api_error(status.HTTP_401_UNAUTHORIZED, "AUTH_INVALID_TOKEN", "Invalid token")

    request.state.user = identity
    return identity


def require_roles(*roles: str):
    """
    Build a dependency that lets the request through only for the given roles.

    Runs after `get_current_user`, so unauthenticated callers still get 401
    and authenticated callers with another role get 403.

    Usage:
        @router.post("", dependencies=[Depends(require_roles("AUTHOR", "ADMIN"))])
    """
    allowed = frozenset(roles)

    async def _require_roles(current: TokenIdentity = Depends(get_current_user)) -> TokenIdentity:
        if current.role not in allowed:
            raise api_error(status.HTTP_403_FORBIDDEN, "FORBIDDEN", "Forbidden")
        return current

    return _require_roles


require_author = require_roles(ROLE_AUTHOR, ROLE_ADMIN)


def ensure_can_modify(article: ArticleRecord, current: TokenIdentity) -> None:
    """Only the article's author or an administrator may change or delete it."""
    if article.author_id != current.id and current.role != ROLE_ADMIN:
        raise api_error(status.HTTP_403_FORBIDDEN, "FORBIDDEN_NOT_OWNER", "Forbidden")
