"""Pydantic schemas for authentication API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Schema for registering a new user."""

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    """Schema for user response (excludes sensitive data)."""

    id: UUID
    name: str
    email: str
    created_at: datetime


class LoginRequest(BaseModel):
    """Schema for login request."""

    email: EmailStr
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    """Schema for login response with JWT token."""

    id: UUID
    name: str
    email: str
    token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds until expiration


class ChangePasswordRequest(BaseModel):
    """Schema for changing a password."""

    name: str | None = None  # Accepted for compatibility, not used
    email: EmailStr
    password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class MessageResponse(BaseModel):
    """Schema for a plain confirmation message."""

    message: str


class TokenPayload(BaseModel):
    """Schema for JWT token payload."""

    sub: str  # Subject (user ID)
    name: str
    exp: datetime  # Expiration time
    iat: datetime  # Issued at time
