"""
Base Repository implementation.
Every repository works on the caller's session and never commits: the
service owning the transaction decides when to commit or roll back.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from sqlalchemy.orm import Session


ModelT = TypeVar("ModelT")


class BaseRepository(ABC, Generic[ModelT]):
    """
    Abstract base repository with the write primitives shared by all
    entities.

    Subclasses must implement:
    - model: the SQLAlchemy model class
    """

    def __init__(self, db: Session):
        self._db = db

    @property
    @abstractmethod
    def model(self) -> type[ModelT]:
        """Return the SQLAlchemy model class."""
        ...

    @property
    def db(self) -> Session:
        return self._db

    def add(self, entity: ModelT) -> ModelT:
        """Add an entity and flush so its primary key is assigned."""
        self._db.add(entity)
        self._db.flush()
        return entity

    def delete(self, entity: ModelT) -> None:
        self._db.delete(entity)
        self._db.flush()

    def get(self, entity_id: int) -> ModelT | None:
        """Fetch by primary key, served from the session's identity map when loaded."""
        return self._db.get(self.model, entity_id)
