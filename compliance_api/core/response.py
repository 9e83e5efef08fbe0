"""Response envelopes shared by every /api/v1 router.

Single records go out as ``{"data": {...}}``; lists as
``{"data": [...], "meta": {"total", "page", "limit", "totalPages"}}``.
"""


import math
from typing import Generic, TypeVar

from compliance_api.core.pagination import PageMeta
from compliance_api.schemas.common import CamelModel

T = TypeVar("T")


class DataResponse(CamelModel, Generic[T]):
    data: T


class ListResponse(CamelModel, Generic[T]):
    data: list[T]
    meta: PageMeta


def paginated(items: list, total: int, page: int, limit: int) -> dict:
    """Wrap one page of *items* with its paging metadata (an empty catalog has 0 pages)."""
    return {
        "data": items,
        "meta": PageMeta(
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
        ),
    }
