"""Repositories: the storage port the services talk to."""

from app.repositories.permissions import PermissionRepository
from app.repositories.roles import RoleRepository
from app.repositories.users import UserRepository

__all__ = ["PermissionRepository", "RoleRepository", "UserRepository"]
