"""Request/response schemas for roles."""

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.permissions import PermissionResponse


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=64, pattern=r"^\S+$")
    permission_ids: list[int] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    """Replaces the permission set; role names are immutable."""

    permission_ids: list[int]


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    permissions: list[PermissionResponse]
