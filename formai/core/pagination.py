"""
Page/limit pagination shared by the list endpoints.
"""
from typing import Sequence, Any

from fastapi import Query
from pydantic import BaseModel

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class PaginationParams(BaseModel):
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE


def pagination_params(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
) -> PaginationParams:
    return PaginationParams(page=page, limit=limit)


def page_count(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return -(-total // limit)


def create_paginated_response(items: Sequence[Any], total: int, page: int, limit: int) -> dict:
    """Envelope with ``items`` plus total, page, limit, pages, has_next and has_prev."""
    pages = page_count(total, limit)
    return {
        "items": list(items),
        "total": total,
        "page": page,
        "limit": limit,
        "pages": pages,
        "has_next": page < pages,
        "has_prev": page > 1,
    }
