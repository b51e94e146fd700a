"""ORM model for application users (credentials, contact fields and role assignments)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from app.core.security import EMAIL_MAX_LEN
from app.models.base import Base
from app.models.role import user_roles


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    roles: every role the user holds (never empty once created).
    primary_role: the default authorization context; always one of roles.
    """

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(EMAIL_MAX_LEN), nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(255), nullable=False, default="")
    last_name = Column(String(255), nullable=False, default="")
    phone = Column(String(64), nullable=False, default="")
    address = Column(String(1024), nullable=False, default="")
    primary_role_id = Column(
        Integer,
        ForeignKey("roles.id", ondelete="RESTRICT"),
        nullable=False,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    primary_role = relationship("Role", foreign_keys=[primary_role_id], lazy="joined")
    roles = relationship(
        "Role",
        secondary=user_roles,
        lazy="selectin",
        order_by="Role.id",
    )

    @property
    def role_names(self) -> list[str]:
        return [r.name for r in self.roles]

    def effective_permissions(self) -> frozenset[str]:
        """Union of permission names across every assigned role."""
        names: set[str] = set()
        for role in self.roles:
            names |= role.permission_names
        return frozenset(names)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"
