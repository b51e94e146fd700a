"""Resolve a token subject to the caller's effective permission set."""

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.repositories import UserRepository


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as seen by the gate and the route handlers."""

    user_id: int
    email: str
    primary_role: str
    roles: tuple[str, ...]
    permissions: frozenset[str]

    def has_any(self, required: Iterable[str]) -> bool:
        """'Any of' semantics: one matching permission is enough."""
        return not self.permissions.isdisjoint(required)


def resolve_principal(session: Session, user_id: int) -> Principal | None:
    """
    Load the user and take the union of permissions across all assigned roles.

    Returns None when the subject no longer exists.
    """
    user = UserRepository(session).find_by_id(user_id)
    if user is None:
        return None
    return Principal(
        user_id=user.id,
        email=user.email,
        primary_role=user.primary_role.name,
        roles=tuple(user.role_names),
        permissions=user.effective_permissions(),
    )
