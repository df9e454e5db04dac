"""
Base repository pattern implementation.

Repositories wrap SQLAlchemy queries for the access-control tables. They
never commit: the administration service owns the transaction boundary so
multi-step writes (e.g. cascading role deletion) stay atomic.
"""

from typing import TypeVar, Generic, Optional, Any, Type
from sqlalchemy.orm import Session

# Type variable for generic entity type
T = TypeVar('T')


class BaseRepository(Generic[T]):
    """
    Common query helpers shared by all access-control repositories.
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model class.

        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    def get_by_id_optional(self, entity_id: Any) -> Optional[T]:
        """
        Get entity by ID, returning None if not found.
        """
        return self.db.get(self.model, entity_id)

    def find_one_by(self, **criteria) -> Optional[T]:
        """
        Find single entity by criteria.
        """
        return self._filtered(**criteria).first()

    def count(self, **criteria) -> int:
        return self._filtered(**criteria).count()

    def add(self, entity: T) -> T:
        """Stage a new entity and flush so generated keys are populated."""
        self.db.add(entity)
        self.db.flush()
        return entity

    def delete_by(self, **criteria) -> int:
        """Bulk delete matching rows, returning the number removed."""
        return self._filtered(**criteria).delete(synchronize_session=False)

    def _filtered(self, **criteria):
        query = self.db.query(self.model)

        for key, value in criteria.items():
            if hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)

        return query
