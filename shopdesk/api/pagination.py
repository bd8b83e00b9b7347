import math
from dataclasses import dataclass

from fastapi import Query
from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from shopdesk.core.config import settings


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=settings.max_page_size),
) -> PageParams:
    return PageParams(page=page, limit=limit)


def count_rows(db: Session, query: Select) -> int:
    return int(db.scalar(select(func.count()).select_from(query.order_by(None).subquery())) or 0)


def paginate_scalars(db: Session, query: Select, params: PageParams) -> tuple[list, int]:
    total = count_rows(db, query)
    items = list(db.scalars(query.offset(params.offset).limit(params.limit)).all())
    return items, total


def paginate_rows(db: Session, query: Select, params: PageParams) -> tuple[list, int]:
    total = count_rows(db, query)
    rows = list(db.execute(query.offset(params.offset).limit(params.limit)).all())
    return rows, total


def page_meta(total: int, params: PageParams) -> dict:
    return {
        "total": total,
        "page": params.page,
        "limit": params.limit,
        "total_pages": math.ceil(total / params.limit) if total else 0,
    }
