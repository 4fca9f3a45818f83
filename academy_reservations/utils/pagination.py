# academy_reservations/utils/pagination.py
import math
from dataclasses import dataclass
from typing import Optional

from academy_reservations.core.config import settings


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def paginate(page: Optional[int] = None, limit: Optional[int] = None) -> PageParams:
    """Clamp page to >= 1 and limit to 1..PAGINATION_MAX_LIMIT."""
    page = max(1, page or 1)
    limit = limit or settings.PAGINATION_DEFAULT_LIMIT
    limit = min(max(1, limit), settings.PAGINATION_MAX_LIMIT)
    return PageParams(page=page, limit=limit)


def pagination_meta(params: PageParams, total_count: int) -> dict:
    total_pages = math.ceil(total_count / params.limit) if params.limit > 0 else 0
    return {
        "page": params.page,
        "limit": params.limit,
        "total_count": total_count,
        "total_pages": total_pages,
    }
