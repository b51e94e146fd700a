"""Permission storage."""

from sqlalchemy.exc import IntegrityError

from app.models import Permission
from app.repositories.base import SqlRepository


class PermissionRepository(SqlRepository[Permission]):
    model = Permission
    entity_label = "Permission"

    def find_by_name(self, name: str) -> Permission | None:
        return self.find_by_unique_key(name=name)

    def find_by_names(self, names: list[str]) -> list[Permission]:
        if not names:
            return []
        return list(
            self.session.query(Permission)
            .filter(Permission.name.in_(names))
            .order_by(Permission.id)
            .all()
        )

    def find_by_ids(self, ids: list[int]) -> list[Permission]:
        if not ids:
            return []
        return list(
            self.session.query(Permission).filter(Permission.id.in_(ids)).order_by(Permission.id).all()
        )

    def get_or_create(self, name: str) -> tuple[Permission, bool]:
        """
        Return (permission, created). Safe when several processes seed at once:
        the loser of an insert race gets an IntegrityError from the unique
        constraint, rolls back its savepoint and reads the winner's row.
        """
        existing = self.find_by_name(name)
        if existing is not None:
            return existing, False
        permission = Permission(name=name)
        try:
            with self.session.begin_nested():
                self.session.add(permission)
        except IntegrityError:
            winner = self.find_by_name(name)
            if winner is None:
                raise
            return winner, False
        return permission, True
