"""Pydantic request/response schemas."""

from app.schemas.auth import AuthenticationRequest, AuthenticationResponse, RegisterRequest
from app.schemas.catalog import RbacCatalog
from app.schemas.health import HealthResponse
from app.schemas.permissions import PermissionCreate, PermissionResponse
from app.schemas.roles import RoleCreate, RoleResponse, RoleUpdate
from app.schemas.users import (
    DeleteResponse,
    UpdateRolesRequest,
    UserCreateRequest,
    UserResponse,
    UsersListResponse,
    UserUpdateRequest,
)

__all__ = [
    "AuthenticationRequest",
    "AuthenticationResponse",
    "DeleteResponse",
    "HealthResponse",
    "PermissionCreate",
    "PermissionResponse",
    "RbacCatalog",
    "RegisterRequest",
    "RoleCreate",
    "RoleResponse",
    "RoleUpdate",
    "UpdateRolesRequest",
    "UserCreateRequest",
    "UserResponse",
    "UsersListResponse",
    "UserUpdateRequest",
]
