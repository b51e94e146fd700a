"""Role resolver: name/id lookups and role/permission membership changes."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import Conflict, NotFound
from app.models import Role
from app.repositories import RoleRepository
from app.services.permissions import PermissionService

logger = logging.getLogger(__name__)


class RoleService:
    def __init__(
        self,
        session: Session,
        roles: RoleRepository | None = None,
        permissions: PermissionService | None = None,
    ) -> None:
        self.session = session
        self.roles = roles or RoleRepository(session)
        self.permissions = permissions or PermissionService(session)

    def find_by_role_name(self, name: str) -> Role:
        """Strict lookup: a missing role is NotFound."""
        role = self.roles.find_by_name(name)
        if role is None:
            raise NotFound(f"Role {name} not found.")
        return role

    def find_one_role(self, role_id: int) -> Role | None:
        return self.roles.get(role_id)

    def get_role(self, role_id: int) -> Role:
        role = self.find_one_role(role_id)
        if role is None:
            raise NotFound("Role not found.")
        return role

    def list_roles(self) -> list[Role]:
        return self.roles.list()

    def create_role(self, name: str, permission_ids: list[int] | None = None) -> Role:
        """Admin path: duplicate names are a Conflict."""
        if self.roles.find_by_name(name) is not None:
            raise Conflict(f"Role {name} already exists.")
        permissions = self.permissions.find_by_ids(permission_ids or [])
        role = self.roles.add(Role(name=name, permissions=permissions))
        self.session.commit()
        logger.info("Role created", extra={"role": name, "permission_count": len(permissions)})
        return role

    def update_role(self, role_id: int, permission_ids: list[int]) -> Role:
        """Replace the role's permission set. The name is never changed."""
        role = self.get_role(role_id)
        role.permissions = self.permissions.find_by_ids(permission_ids)
        self.roles.save(role)
        self.session.commit()
        logger.info("Role permissions replaced", extra={"role": role.name})
        return role

    def add_permission_to_role(self, role_id: int, permission_id: int) -> Role:
        role = self.get_role(role_id)
        self.permissions.find_one_permission(permission_id)
        added = self.roles.add_permission(role, permission_id)
        self.session.commit()
        if added:
            logger.info("Permission %s added to role %s", permission_id, role.name)
        self.session.refresh(role)
        return role

    def remove_permission_from_role(self, role_id: int, permission_id: int) -> Role:
        role = self.get_role(role_id)
        self.permissions.find_one_permission(permission_id)
        self.roles.remove_permission(role, permission_id)
        self.session.commit()
        self.session.refresh(role)
        return role

    def delete_role(self, role_id: int) -> None:
        """
        Delete a role and its memberships. Refused while it is any user's primary
        role, so no user is left without a valid primary role.
        """
        role = self.get_role(role_id)
        holders = self.roles.count_primary_holders(role.id)
        if holders:
            raise Conflict(f"Role {role.name} is the primary role of {holders} user(s).")
        try:
            self.roles.delete_memberships(role.id)
            self.session.expire(role)
            self.roles.delete(role)
        except IntegrityError as e:
            # A user took this role as primary after the check above.
            self.session.rollback()
            raise Conflict(f"Role {role_id} is the primary role of a user.") from e
        self.session.commit()
        logger.info("Role deleted", extra={"role_id": role_id})
