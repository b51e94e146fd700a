"""Storage port shared by the entity repositories: get / add / delete / find by unique key."""

from typing import Any, Generic, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import Conflict
from app.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class SqlRepository(Generic[ModelT]):
    """
    Thin repository over a SQLAlchemy session.

    Writes run inside a SAVEPOINT so a unique-constraint violation rolls back
    only the failed statement and surfaces as Conflict; the caller's outer
    transaction stays usable. Committing is left to the service layer.
    """

    model: type[ModelT]
    entity_label: str = "Entity"

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, entity_id: int) -> ModelT | None:
        return self.session.get(self.model, entity_id)

    def list(self) -> list[ModelT]:
        return list(self.session.query(self.model).order_by(self.model.id).all())

    def find_by_unique_key(self, **key: Any) -> ModelT | None:
        return self.session.query(self.model).filter_by(**key).first()

    def add(self, entity: ModelT) -> ModelT:
        try:
            with self.session.begin_nested():
                self.session.add(entity)
        except IntegrityError as e:
            raise Conflict(f"{self.entity_label} already exists.") from e
        return entity

    def save(self, entity: ModelT) -> ModelT:
        """Flush pending changes to an already-tracked entity."""
        try:
            with self.session.begin_nested():
                self.session.flush()
        except IntegrityError as e:
            raise Conflict(f"{self.entity_label} violates a uniqueness rule.") from e
        return entity

    def delete(self, entity: ModelT) -> None:
        self.session.delete(entity)
        self.session.flush()

    def exists(self, entity_id: int) -> bool:
        """Re-read from the database, bypassing the identity map."""
        return (
            self.session.query(self.model.id).filter(self.model.id == entity_id).first()
            is not None
        )
