# allosports/api/routers/auth.py
import logging

from fastapi import APIRouter, Depends, Response, status

from allosports.api.deps import get_current_user, get_settings, get_storage
from allosports.config import Settings
from allosports.core.errors import api_error
from allosports.core.security import (
    TokenIdentity,
    clear_auth_cookie,
    create_access_token,
    hash_password,
    set_auth_cookie,
    verify_password,
)
from allosports.schemas.auth import LoginRequest, RegisterIn
from allosports.storage import ROLE_AUTHOR, NewUser, Storage, UserRecord

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/auth", tags=["auth"])


def user_to_dict(u: UserRecord) -> dict:
    """
    Convert a user record to its API representation.
    The password hash is never part of it.
    """
    return {
        "id": u.id,
        "username": u.username,
        "email": u.email,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "profileImageUrl": u.profile_image_url,
        "role": u.role,
        "createdAt": u.created_at.isoformat() if u.created_at else None,
    }


def _issue_token(response: Response, user: UserRecord, config: Settings) -> None:
    token = create_access_token(user.id, user.username, user.role, config)
    set_auth_cookie(response, token, config)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterIn,
    response: Response,
    storage: Storage = Depends(get_storage),
    config: Settings = Depends(get_settings),
):
    """
    Register a new author account and sign it in.

    Username and email must each be unique; the username is checked first.
    The password is hashed (bcrypt, cost 10) before storage.

    Returns:
        dict: The created user (no password), with the auth cookie set.

    Error codes (400):
        - VALIDATION_ERROR: Body does not match the schema
        - USERNAME_EXISTS: Username already taken
        - EMAIL_EXISTS: Email already registered
    """
    if await storage.get_user_by_username(body.username):
        raise api_error(status.HTTP_400_BAD_REQUEST, "USERNAME_EXISTS", "Username already exists")
    if await storage.get_user_by_email(str(body.email)):
        raise api_error(status.HTTP_400_BAD_REQUEST, "EMAIL_EXISTS", "Email already registered")

    user = await storage.create_user(NewUser(
        username=body.username,
        email=str(body.email),
        password_hash=hash_password(body.password),
        role=ROLE_AUTHOR,
        first_name=body.firstName or None,
        last_name=body.lastName or None,
    ))
    _issue_token(response, user, config)
    logger.info("[auth] registered username=%s id=%s", user.username, user.id)
    return user_to_dict(user)


@router.post("/login")
async def login(
    payload: LoginRequest,
    response: Response,
    storage: Storage = Depends(get_storage),
    config: Settings = Depends(get_settings),
):
    """
    Authenticate with username + password and set the auth cookie.

    An unknown username and a wrong password produce the same 401 response,
    so the endpoint cannot be used to probe which usernames exist.
    """
    user = await storage.get_user_by_username(payload.username)
    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("[auth] failed login for username=%s", payload.username)
        raise api_error(status.HTTP_401_UNAUTHORIZED, "AUTH_INVALID_CREDENTIALS", "Invalid credentials")
    _issue_token(response, user, config)
    return user_to_dict(user)


@router.post("/logout")
async def logout(response: Response, config: Settings = Depends(get_settings)):
    """
    Clear the auth cookie. Always succeeds, even without a cookie.

    Note:
        The token itself stays valid until it expires; logging out only
        removes it from the browser.
    """
    clear_auth_cookie(response, config)
    return {"message": "Logged out"}


@router.get("/me")
async def me(
    current: TokenIdentity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Current user's profile, looked up from the id in the token.

    Raises:
        HTTPException (401): If user is not authenticated
        HTTPException (404): If the token's user no longer exists
    """
    user = await storage.get_user(current.id)
    if not user:
        raise api_error(status.HTTP_404_NOT_FOUND, "USER_NOT_FOUND", "User not found")
    return user_to_dict(user)
