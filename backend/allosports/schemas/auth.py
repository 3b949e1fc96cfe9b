# allosports/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """
    Request model for user login endpoint.
    """
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)  # Plain text, compared against the stored hash


class RegisterIn(BaseModel):
    """
    Request model for account registration.
    New accounts get the AUTHOR role.
    """
    username: str = Field(min_length=3, max_length=256)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)  # bcrypt only reads the first 72 bytes
    firstName: Optional[str] = Field(default=None, max_length=128)
    lastName: Optional[str] = Field(default=None, max_length=128)
