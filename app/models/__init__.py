"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.catalog_state import CATALOG_STATE_ID, CatalogState
from app.models.permission import Permission
from app.models.role import Role, role_permissions, user_roles
from app.models.user import User

__all__ = [
    "Base",
    "CATALOG_STATE_ID",
    "CatalogState",
    "Permission",
    "Role",
    "User",
    "role_permissions",
    "user_roles",
]
