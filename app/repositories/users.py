"""User (credential) storage."""

from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError

from app.models import User, user_roles
from app.repositories.base import SqlRepository


class UserRepository(SqlRepository[User]):
    model = User
    entity_label = "User"

    def find_by_id(self, user_id: int) -> User | None:
        return self.get(user_id)

    def find_by_email(self, email: str) -> User | None:
        return self.find_by_unique_key(email=email)

    def add_role(self, user: User, role_id: int) -> bool:
        """Insert one user/role membership row; False when already present."""
        try:
            with self.session.begin_nested():
                self.session.execute(insert(user_roles).values(user_id=user.id, role_id=role_id))
        except IntegrityError:
            return False
        finally:
            self.session.expire(user, ["roles"])
        return True

    def delete_by_id(self, user_id: int) -> None:
        """Remove role associations first, then the user row. Unknown ids are a no-op."""
        user = self.get(user_id)
        if user is None:
            return
        user.roles.clear()
        self.session.flush()
        self.delete(user)
