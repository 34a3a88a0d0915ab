import math
from typing import Any, Literal, Optional

from fastapi import Query
from pydantic import BaseModel

from agrovision.core.errors import ValidationError


class PaginationParams(BaseModel):
    page: int = 1
    limit: int = 10
    sort: Optional[str] = None
    order: Literal["asc", "desc"] = "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_pagination(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort: Optional[str] = Query(None),
    order: Literal["asc", "desc"] = Query("desc"),
) -> PaginationParams:
    return PaginationParams(page=page, limit=limit, sort=sort, order=order)


def resolve_sort(params: PaginationParams, sort_fields: dict[str, Any], default: str = "dataCriacao"):
    """Translate the public sort key into an ORDER BY clause."""
    key = params.sort or default
    column = sort_fields.get(key)
    if column is None:
        raise ValidationError(
            f"Campo de ordenacao invalido: {key}",
            details={"sort": sorted(sort_fields)},
        )
    return column.asc() if params.order == "asc" else column.desc()


def paginated(items: list, total: int, params: PaginationParams) -> dict[str, Any]:
    return {
        "data": items,
        "pagination": {
            "page": params.page,
            "limit": params.limit,
            "total": total,
            "pages": math.ceil(total / params.limit) if total else 0,
        },
    }
