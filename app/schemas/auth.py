"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from app.schemas.users import UserResponse


class RegisterRequest(BaseModel):
    """Self-service registration body."""

    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    phone: str = Field(default="", max_length=64)
    address: str = Field(default="", max_length=1024)


class AuthenticationRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class AuthenticationResponse(BaseModel):
    """JWT access token returned after register or login, with an identity summary."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime = Field(..., description="Instant at which the token stops being accepted")
    user: UserResponse
