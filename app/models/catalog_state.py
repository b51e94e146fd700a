"""ORM model recording which RBAC catalog version has been applied to the database."""

from sqlalchemy import JSON, Column, DateTime, Integer, func

from app.models.base import Base

# Single row; the table only ever holds the latest applied catalog.
CATALOG_STATE_ID = 1


class CatalogState(Base):
    """
    Last applied catalog version and the grants it defined, per role.

    grants lets an upgrade add only what the new version introduces, so
    permissions an admin removed by hand are not granted again.
    """

    __tablename__ = "rbac_catalog_state"

    id = Column(Integer, primary_key=True, default=CATALOG_STATE_ID)
    version = Column(Integer, nullable=False)
    grants = Column(JSON, nullable=False, default=dict)
    applied_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<CatalogState(version={self.version})>"
