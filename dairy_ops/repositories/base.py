# dairy_ops/repositories/base.py
from __future__ import annotations

from typing import Any, Dict, Generic, Iterable, Optional, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.orm import Session

from dairy_ops.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository with common CRUD and query helpers.

    - Does not commit/rollback; caller manages transactions.
    - Rows are never hard-deleted through repositories.
    """

    def __init__(self, session: Session, model: Type[ModelType]):
        self.session = session
        self.model = model

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _base_select(self) -> Select[tuple[ModelType]]:
        return select(self.model)

    # ------------------------------------------------------------------ #
    # Basic CRUD
    # ------------------------------------------------------------------ #
    def get(self, id_: UUID) -> Optional[ModelType]:
        stmt = self._base_select().where(self.model.id == id_)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_for_update(self, id_: UUID) -> Optional[ModelType]:
        """Load a row holding a write lock until the transaction ends."""
        stmt = self._base_select().where(self.model.id == id_).with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def create(self, obj_in: Dict[str, Any] | ModelType) -> ModelType:
        if isinstance(obj_in, self.model):
            db_obj = obj_in
        else:
            db_obj = self.model(**obj_in)  # type: ignore[arg-type]
        self.session.add(db_obj)
        # flush to populate PK and surface constraint violations early
        self.session.flush()
        return db_obj

    def update(
        self,
        db_obj: ModelType,
        obj_in: Dict[str, Any],
    ) -> ModelType:
        for field, value in obj_in.items():
            if hasattr(db_obj, field) and field != "id":
                setattr(db_obj, field, value)

        self.session.flush()
        return db_obj

    # ------------------------------------------------------------------ #
    # Bulk helpers
    # ------------------------------------------------------------------ #
    def bulk_create(self, objs: Iterable[Dict[str, Any] | ModelType]) -> Sequence[ModelType]:
        instances: list[ModelType] = []
        for obj in objs:
            if isinstance(obj, self.model):
                instances.append(obj)
            else:
                instances.append(self.model(**obj))  # type: ignore[arg-type]
        self.session.add_all(instances)
        self.session.flush()
        return instances

    def bulk_update(
        self,
        filters: Dict[str, Any],
        values: Dict[str, Any],
    ) -> int:
        """
        Issue one UPDATE for every row matching ``filters``.

        Collection values become ``IN`` clauses. Returns the affected row
        count. Instances already loaded in the session are synchronized.
        """
        stmt = update(self.model)
        for key, value in filters.items():
            column = getattr(self.model, key, None)
            if column is None:
                continue
            if isinstance(value, (list, tuple, set, frozenset)):
                stmt = stmt.where(column.in_(list(value)))
            else:
                stmt = stmt.where(column == value)
        stmt = stmt.values(**values).execution_options(synchronize_session="fetch")
        result = self.session.execute(stmt)
        self.session.flush()
        return result.rowcount or 0
