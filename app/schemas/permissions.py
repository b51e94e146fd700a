"""Request/response schemas for the permission catalog."""

from pydantic import BaseModel, ConfigDict, Field

PERMISSION_NAME_PATTERN = r"^[A-Z][A-Z0-9]*(_[A-Z0-9]+)+$"


class PermissionCreate(BaseModel):
    name: str = Field(..., max_length=128, pattern=PERMISSION_NAME_PATTERN, description="e.g. READ_FILES")


class PermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    resource: str
