"""ORM model for named capabilities in the permission catalog."""

from sqlalchemy import Column, Integer, String, UniqueConstraint

from app.models.base import Base


class Permission(Base):
    """
    Immutable named capability, e.g. READ_USER or CREATE_FILES.

    The unique constraint on name is what keeps concurrent seeding from
    inserting duplicates.
    """

    __tablename__ = "permissions"
    __table_args__ = (UniqueConstraint("name", name="uq_permissions_name"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(128), nullable=False)

    @property
    def resource(self) -> str:
        """Resource area the permission gates, taken from the name suffix (READ_FILES -> files)."""
        _, _, area = self.name.partition("_")
        return area.lower() or self.name.lower()

    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, name={self.name!r})>"
