"""Request/response schemas for user management."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN


class UserCreateRequest(BaseModel):
    """Admin-initiated account creation; user_type selects the ADMIN or USER role."""

    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    phone: str = Field(default="", max_length=64)
    address: str = Field(default="", max_length=1024)
    user_type: str = Field(default="user", description="'admin' or 'user'")


class UserUpdateRequest(BaseModel):
    """Partial update. Email is accepted only if unchanged; roles replaces the role set."""

    first_name: str | None = Field(default=None, min_length=1, max_length=255)
    last_name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    password: str | None = Field(
        default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN
    )
    phone: str | None = Field(default=None, max_length=64)
    address: str | None = Field(default=None, max_length=1024)
    roles: list[int] | None = Field(default=None, description="Role ids")


class UpdateRolesRequest(BaseModel):
    role_ids: list[int] = Field(..., description="Replacement role set (primary role is always kept)")


class UserResponse(BaseModel):
    """User without credentials."""

    id: int
    email: str
    first_name: str
    last_name: str
    phone: str
    address: str
    primary_role: str
    roles: list[str]
    created_at: datetime | None = None

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            address=user.address,
            primary_role=user.primary_role.name,
            roles=user.role_names,
            created_at=user.created_at,
        )


class UsersListResponse(BaseModel):
    users: list[UserResponse]


class DeleteResponse(BaseModel):
    """Structured delete outcome; success=False means the record survived the delete."""

    success: bool
    messages: str
    id: int
