"""Credential store operations: registration, login, admin user management, deletion."""

import logging
from collections.abc import Collection
from dataclasses import asdict, dataclass

from sqlalchemy.orm import Session

from app.core.errors import Conflict, Forbidden, InvalidCredentials, NotFound, ValidationError
from app.core.security import hash_password, verify_password
from app.models import Role, User
from app.repositories import UserRepository
from app.schemas.auth import RegisterRequest
from app.schemas.users import UserCreateRequest, UserUpdateRequest
from app.services.roles import RoleService

logger = logging.getLogger(__name__)

SUCCESSFUL_DELETION = "User deleted successfully"
FAILED_DELETION = "Failed to delete user"

# Admin-created accounts pick one of these via user_type.
USER_TYPE_ROLES = {"admin": "ADMIN", "user": "USER"}


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of delete_user, reported as data rather than an exception."""

    success: bool
    messages: str
    id: int

    def as_dict(self) -> dict[str, object]:
        return asdict(self)


class UserService:
    def __init__(
        self,
        session: Session,
        users: UserRepository | None = None,
        roles: RoleService | None = None,
    ) -> None:
        self.session = session
        self.users = users or UserRepository(session)
        self.roles = roles or RoleService(session)

    def _ensure_email_free(self, email: str) -> None:
        if self.users.find_by_email(email) is not None:
            raise Conflict("Email is already in use.")

    def _new_user(self, fields: RegisterRequest | UserCreateRequest, role: Role) -> User:
        user = User(
            email=fields.email,
            password_hash=hash_password(fields.password),
            first_name=fields.first_name,
            last_name=fields.last_name,
            phone=fields.phone,
            address=fields.address,
            primary_role=role,
            roles=[role],
        )
        self.users.add(user)
        self.session.commit()
        return user

    def register(
        self,
        request: RegisterRequest,
        role_id: int,
        allowed_role_names: Collection[str] | None = None,
    ) -> User:
        """
        Self-service registration with role_id as the primary (and only) role.

        allowed_role_names limits which roles an unauthenticated caller may
        claim; None allows any role.
        """
        role = self.roles.get_role(role_id)
        if allowed_role_names is not None and role.name not in allowed_role_names:
            logger.warning("Registration refused for role %s", role.name)
            raise Forbidden("Forbidden")
        self._ensure_email_free(request.email)
        user = self._new_user(request, role)
        logger.info("User registered", extra={"user_id": user.id, "role": role.name})
        return user

    def authenticate(self, email: str, password: str) -> User:
        """Verify credentials; unknown email and wrong password are indistinguishable."""
        user = self.users.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentials("Invalid email or password.")
        return user

    def create_user(self, request: UserCreateRequest) -> User:
        """Admin path: user_type 'admin' or 'user' selects ADMIN or USER as the primary role."""
        self._ensure_email_free(request.email)
        role_name = USER_TYPE_ROLES.get(request.user_type.strip().lower())
        if role_name is None:
            raise ValidationError("Invalid user type provided. Must be either 'admin' or 'user'.")
        role = self.roles.find_by_role_name(role_name)
        user = self._new_user(request, role)
        logger.info("User created", extra={"user_id": user.id, "role": role.name})
        return user

    def find_all_users(self) -> list[User]:
        return self.users.list()

    def find_one_user(self, user_id: int) -> User:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found.")
        return user

    def _resolve_roles(self, role_ids: list[int], primary: Role) -> list[Role]:
        """Unknown role ids are skipped; the primary role always stays in the set."""
        resolved: list[Role] = []
        for role_id in dict.fromkeys(role_ids):
            role = self.roles.find_one_role(role_id)
            if role is None:
                logger.info("Skipping unknown role id %s", role_id)
                continue
            resolved.append(role)
        if primary.id not in {r.id for r in resolved}:
            resolved.insert(0, primary)
        return resolved

    def update_user(self, user_id: int, request: UserUpdateRequest) -> User:
        user = self.find_one_user(user_id)
        if request.email is not None and request.email != user.email:
            raise ValidationError("Email cannot be changed.")
        for field in ("first_name", "last_name", "phone", "address"):
            value = getattr(request, field)
            if value is not None:
                setattr(user, field, value)
        if request.password is not None:
            user.password_hash = hash_password(request.password)
        if request.roles is not None:
            user.roles = self._resolve_roles(request.roles, user.primary_role)
        self.users.save(user)
        self.session.commit()
        logger.info("User updated", extra={"user_id": user.id})
        return user

    def add_role_to_user(self, user_id: int, role_id: int) -> User:
        user = self.find_one_user(user_id)
        role = self.roles.get_role(role_id)
        self.users.add_role(user, role.id)
        self.session.commit()
        self.session.refresh(user)
        return user

    def update_roles(self, user_id: int, role_ids: list[int]) -> User:
        user = self.find_one_user(user_id)
        user.roles = self._resolve_roles(role_ids, user.primary_role)
        self.users.save(user)
        self.session.commit()
        return user

    def delete_user(self, user_id: int) -> DeleteResult:
        """
        Delete the user and their role links in one transaction, then re-read.

        If the row is still visible the transaction is rolled back and a
        failed result is returned instead of raising.
        """
        self.find_one_user(user_id)
        self.users.delete_by_id(user_id)
        if self.users.exists(user_id):
            self.session.rollback()
            logger.warning("User %s still present after delete; rolled back", user_id)
            return DeleteResult(success=False, messages=FAILED_DELETION, id=user_id)
        self.session.commit()
        logger.info("User deleted", extra={"user_id": user_id})
        return DeleteResult(success=True, messages=SUCCESSFUL_DELETION, id=user_id)
