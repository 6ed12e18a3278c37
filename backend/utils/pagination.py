# utils/pagination.py
import math
from typing import Any, Dict, Optional

from sqlalchemy.orm import Query

# Server-side cap on page size, whatever the client asks for
MAX_PAGE_SIZE = 10
# Row cap for CSV/PDF exports
EXPORT_LIMIT = 10000


def clamp_limit(limit: Optional[int]) -> int:
    return min(limit or MAX_PAGE_SIZE, MAX_PAGE_SIZE)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def paginate(query: Query, page: int, limit: Optional[int]) -> Dict[str, Any]:
    """Run `query` for one page and return the list envelope."""
    actual_limit = clamp_limit(limit)
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * actual_limit).limit(actual_limit).all()
    return {
        "data": rows,
        "page": page,
        "limit": actual_limit,
        "total": total,
        "total_pages": total_pages(total, actual_limit),
    }
