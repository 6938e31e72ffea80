"""Page/limit normalization and pagination metadata."""

import math
from dataclasses import dataclass
from typing import Any

from newsdesk.schemas.common import PaginationMeta

USER_VIEW_DEFAULT_LIMIT = 20
USER_VIEW_MAX_LIMIT = 50
MODERATION_DEFAULT_LIMIT = 50
MODERATION_MAX_LIMIT = 100
# Keeps skip well inside a 32-bit OFFSET whatever the limit.
MAX_PAGE = 10_000


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_page_params(
    page: Any = None,
    limit: Any = None,
    default_limit: int = USER_VIEW_DEFAULT_LIMIT,
    max_limit: int = USER_VIEW_MAX_LIMIT,
) -> PageParams:
    """Clamp page to 1..MAX_PAGE and limit to 1..max_limit; unparseable values fall back to defaults."""
    page_i = _to_int(page)
    limit_i = _to_int(limit)
    page_i = page_i if page_i and page_i > 0 else 1
    limit_i = limit_i if limit_i and limit_i > 0 else default_limit
    return PageParams(page=min(page_i, MAX_PAGE), limit=min(limit_i, max_limit))


def build_pagination_meta(page: int, limit: int, total: int) -> PaginationMeta:
    total_pages = max(1, math.ceil(total / limit)) if limit else 1
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
