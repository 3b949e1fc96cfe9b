# allosports/core/security.py
"""
Security module for authentication and authorization.
Handles password hashing, JWT token creation/validation and the auth cookie.
"""
import datetime as dt
from dataclasses import dataclass

import jwt  # PyJWT
from fastapi import Response
from passlib.context import CryptContext

from allosports.config import Settings, settings as default_settings

# Password hashing context
# bcrypt with a cost factor of 10 (2^10 rounds); hashes look like "$2b$10$..."
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=10,
)

JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)
TOKEN_COOKIE_NAME = "token"


class InvalidToken(Exception):
    """Raised when a token has a bad signature, a malformed payload or has expired."""


@dataclass(frozen=True)
class TokenIdentity:
    """Identity carried inside a verified token."""
    id: str
    username: str
    role: str


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Returns False (instead of raising) when the stored hash is unusable.
    """
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def create_access_token(
    user_id: str,
    username: str,
    role: str,
    config: Settings | None = None,
) -> str:
    """
    Create a signed access token for a user.

    The payload carries id, username and role so the access-control layer can
    authorize a request without a database round-trip.

    Token payload includes:
        - id: User ID
        - username: Login name
        - role: USER / AUTHOR / ADMIN
        - iat: Issued at timestamp
        - exp: Expiration timestamp (7 days by default)
    """
    config = config or default_settings
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "id": user_id,
        "username": username,
        "role": role,
        "iat": now,
        "exp": now + dt.timedelta(minutes=config.access_token_expire_minutes),
    }
    return jwt.encode(payload, config.signing_key(), algorithm=JWT_ALG)


def decode_access_token(token: str, config: Settings | None = None) -> dict:
    """
    Decode and validate an access token.

    Returns:
        Decoded token payload dictionary

    Raises:
        InvalidToken: If the signature does not match, the token is expired,
            or the payload lacks any of id/username/role.
    """
    config = config or default_settings
    try:
        payload = jwt.decode(
            token,
            config.signing_key(),
            algorithms=[JWT_ALG],
            options={"require": ["exp"]},
        )
    except jwt.PyJWTError as exc:
        raise InvalidToken(str(exc)) from exc

    for claim in ("id", "username", "role"):
        if not isinstance(payload.get(claim), str) or not payload[claim]:
            raise InvalidToken(f"token payload is missing '{claim}'")
    return payload


def verify_access_token(token: str, config: Settings | None = None) -> TokenIdentity:
    payload = decode_access_token(token, config)
    return TokenIdentity(id=payload["id"], username=payload["username"], role=payload["role"])


def set_auth_cookie(response: Response, token: str, config: Settings | None = None) -> None:
    """Attach the token as an HttpOnly, SameSite=Lax cookie living as long as the token."""
    config = config or default_settings
    response.set_cookie(
        TOKEN_COOKIE_NAME,
        token,
        max_age=config.access_token_expire_minutes * 60,
        httponly=True,
        secure=config.cookie_secure,
        samesite="lax",
    )


def clear_auth_cookie(response: Response, config: Settings | None = None) -> None:
    config = config or default_settings
    response.delete_cookie(
        TOKEN_COOKIE_NAME,
        httponly=True,
        secure=config.cookie_secure,
        samesite="lax",
    )
