from datetime import datetime
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.orm import Query, Session

from agrovision.common.pagination import PaginationParams, resolve_sort

ModelT = TypeVar("ModelT")


class SoftDeleteRepository(Generic[ModelT]):
    """Persistence for one soft-deletable model.

    Default reads go through ``active()``; ``with_deleted()`` is reserved for
    administrative lookups that must see soft-deleted rows.
    """

    model: Type[ModelT]
    sort_fields: dict[str, Any] = {}

    def __init__(self, db: Session) -> None:
        self.db = db

    def active(self) -> Query:
        return self.db.query(self.model).filter(self.model.deleted_at.is_(None))

    def with_deleted(self) -> Query:
        return self.db.query(self.model)

    def get(self, entity_id: str) -> Optional[ModelT]:
        return self.active().filter(self.model.id == entity_id).first()

    def get_including_deleted(self, entity_id: str) -> Optional[ModelT]:
        return self.with_deleted().filter(self.model.id == entity_id).first()

    def add(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def save(self, entity: ModelT) -> ModelT:
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def soft_delete(self, entity: ModelT) -> None:
        entity.deleted_at = datetime.utcnow()
        self.db.commit()

    def paginate(self, query: Query, params: PaginationParams) -> tuple[list[ModelT], int]:
        total = query.order_by(None).count()
        items = (
            query.order_by(resolve_sort(params, self.sort_fields))
            .offset(params.offset)
            .limit(params.limit)
            .all()
        )
        return items, total
