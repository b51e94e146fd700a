"""Permission catalog: idempotent seeding path and admin create path."""

import logging

from sqlalchemy.orm import Session

from app.core.errors import Conflict, NotFound
from app.models import Permission
from app.repositories import PermissionRepository

logger = logging.getLogger(__name__)


class PermissionService:
    def __init__(self, session: Session, permissions: PermissionRepository | None = None) -> None:
        self.session = session
        self.permissions = permissions or PermissionRepository(session)

    def ensure_permission(self, name: str) -> Permission:
        """Get-or-create by unique name. Used by bootstrap; never raises Conflict."""
        permission, created = self.permissions.get_or_create(name)
        if created:
            logger.info("Created permission %s", name)
        return permission

    def ensure_permissions(self, names: list[str]) -> list[Permission]:
        return [self.ensure_permission(name) for name in names]

    def create_permission(self, name: str) -> Permission:
        """Admin path: an existing name is a Conflict, not a silent no-op."""
        if self.permissions.find_by_name(name) is not None:
            raise Conflict(f"Permission {name} already exists.")
        permission = self.permissions.add(Permission(name=name))
        self.session.commit()
        logger.info("Permission created", extra={"permission": name})
        return permission

    def list_permissions(self) -> list[Permission]:
        return self.permissions.list()

    def find_one_permission(self, permission_id: int) -> Permission:
        permission = self.permissions.get(permission_id)
        if permission is None:
            raise NotFound("Permission not found.")
        return permission

    def find_by_ids(self, permission_ids: list[int]) -> list[Permission]:
        """Resolve ids, failing with NotFound if any id is unknown."""
        unique_ids = list(dict.fromkeys(permission_ids))
        found = self.permissions.find_by_ids(unique_ids)
        missing = set(unique_ids) - {p.id for p in found}
        if missing:
            raise NotFound(f"Permissions not found: {sorted(missing)}")
        return found
