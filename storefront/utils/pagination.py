import math
from dataclasses import dataclass
from fastapi import Query
from sqlalchemy import asc, desc


@dataclass
class Page:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(page: int = Query(default=1, ge=1), limit: int = Query(default=10, ge=1, le=100)) -> Page:
    return Page(page=page, limit=limit)


def sort_clause(model, sort_by: str | None, order: str | None, allowed: list[str], default: str = 'created_at'):
    """Map ``sort_by``/``order`` query values to an ORDER BY clause, falling back to ``default`` desc."""
    field = sort_by if sort_by in allowed else default
    direction = asc if (order or '').lower() == 'asc' else desc
    return direction(getattr(model, field))


def pagination_meta(page: Page, total: int) -> dict:
    total_pages = math.ceil(total / page.limit) if total else 0
    return {
        'page': page.page,
        'limit': page.limit,
        'total': total,
        'total_pages': total_pages,
        'has_more': page.page < total_pages,
    }
