"""
Repository Base Module
======================

Defines the repository interface every entity repository implements,
plus the generic SQLAlchemy implementation shared by all providers.

Contract:
- ``find_*`` methods return ``None`` or an empty list instead of raising
- ``create`` / ``update`` commit and return the refreshed entity
- ``update`` returns ``None`` when the entity does not exist
- ``delete`` returns ``False`` when the entity does not exist
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reportflow.core.exceptions import ConflictError
from reportflow.core.logging import get_logger
from reportflow.db.base import Base

# Initialize logger
logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(ABC, Generic[ModelType]):
    """Repository interface with common CRUD operations."""

    @abstractmethod
    def find_by_id(self, entity_id: UUID) -> Optional[ModelType]:
        """Get entity by its primary key, or None."""

    @abstractmethod
    def find_all(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[ModelType]:
        """List entities, optionally paginated."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> ModelType:
        """Persist a new entity built from ``data``."""

    @abstractmethod
    def update(self, entity_id: UUID, data: Dict[str, Any]) -> Optional[ModelType]:
        """Apply ``data`` to an existing entity."""

    @abstractmethod
    def delete(self, entity_id: UUID) -> bool:
        """Delete entity by primary key."""

    @abstractmethod
    def count(self) -> int:
        """Number of stored entities."""


class SQLAlchemyRepository(BaseRepository[ModelType]):
    """
    Generic repository backed by a SQLAlchemy session.

    Works unchanged on SQLite, MySQL and Postgres; provider differences
    live in the engine configuration.
    """

    model: Type[ModelType]
    # Columns that should be listed newest first
    order_by_column: str = "created_at"

    def __init__(self, db: Session):
        self.db = db

    # --------------------------
    # Query helpers
    # --------------------------

    def _select(self):
        return select(self.model)

    def _ordered(self, stmt):
        column = getattr(self.model, self.order_by_column, None)
        if column is not None:
            stmt = stmt.order_by(column.desc())
        return stmt

    def _paginate(self, stmt, limit: Optional[int], offset: Optional[int]):
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return stmt

    def _all(self, stmt) -> List[ModelType]:
        return list(self.db.scalars(stmt).all())

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                "Integrity error on write",
                extra={"model": self.model.__name__, "error": str(e.orig)}
            )
            raise ConflictError(f"{self.model.__name__} violates a uniqueness or reference constraint")

    # --------------------------
    # CRUD
    # --------------------------

    def find_by_id(self, entity_id: UUID) -> Optional[ModelType]:
        return self.db.get(self.model, entity_id)

    def find_all(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[ModelType]:
        stmt = self._paginate(self._ordered(self._select()), limit, offset)
        return self._all(stmt)

    def create(self, data: Dict[str, Any]) -> ModelType:
        entity = self.model(**data)
        self.db.add(entity)
        self._commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity_id: UUID, data: Dict[str, Any]) -> Optional[ModelType]:
        entity = self.find_by_id(entity_id)
        if entity is None:
            return None
        for field, value in data.items():
            setattr(entity, field, value)
        self._commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity_id: UUID) -> bool:
        entity = self.find_by_id(entity_id)
        if entity is None:
            return False
        self.db.delete(entity)
        self._commit()
        return True

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(self.model)) or 0
