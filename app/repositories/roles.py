"""Role storage, including atomic role/permission membership changes."""

from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError

from app.models import Role, User, role_permissions, user_roles
from app.repositories.base import SqlRepository


class RoleRepository(SqlRepository[Role]):
    model = Role
    entity_label = "Role"

    def find_by_name(self, name: str) -> Role | None:
        return self.find_by_unique_key(name=name)

    def get_or_create(self, name: str) -> tuple[Role, bool]:
        existing = self.find_by_name(name)
        if existing is not None:
            return existing, False
        role = Role(name=name)
        try:
            with self.session.begin_nested():
                self.session.add(role)
        except IntegrityError:
            winner = self.find_by_name(name)
            if winner is None:
                raise
            return winner, False
        return role, True

    def add_permission(self, role: Role, permission_id: int) -> bool:
        """
        Insert one membership row. Returns False when it was already present.

        Two admins adding different permissions to the same role both land,
        since each insert touches only its own (role_id, permission_id) row.
        """
        try:
            with self.session.begin_nested():
                self.session.execute(
                    insert(role_permissions).values(role_id=role.id, permission_id=permission_id)
                )
        except IntegrityError:
            return False
        finally:
            self.session.expire(role, ["permissions"])
        return True

    def remove_permission(self, role: Role, permission_id: int) -> bool:
        result = self.session.execute(
            delete(role_permissions).where(
                role_permissions.c.role_id == role.id,
                role_permissions.c.permission_id == permission_id,
            )
        )
        self.session.expire(role, ["permissions"])
        return result.rowcount > 0

    def count_primary_holders(self, role_id: int) -> int:
        return self.session.query(User).filter(User.primary_role_id == role_id).count()

    def delete_memberships(self, role_id: int) -> None:
        self.session.execute(delete(user_roles).where(user_roles.c.role_id == role_id))
        self.session.execute(delete(role_permissions).where(role_permissions.c.role_id == role_id))
