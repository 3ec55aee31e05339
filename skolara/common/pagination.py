import math
from dataclasses import dataclass
from typing import Any, Dict, Optional
from fastapi import Query
from skolara.config.settings import config_settings

DEFAULT_PAGE_SIZE = config_settings.DEFAULT_PAGE_SIZE
MAX_PAGE_SIZE = config_settings.MAX_PAGE_SIZE


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int
    search: str = ""

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def search_term(self) -> Optional[str]:
        term = self.search.strip()
        return term or None


def page_params(page: int = Query(1, ge=1),
                limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
                search: str = Query("", max_length=100)) -> PageParams:
    return PageParams(page=page, limit=limit, search=search)


def pagination_meta(page: int, limit: int, total: int) -> Dict[str, Any]:
    total = total or 0
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


def escape_like(term: str) -> str:
    """Escape LIKE wildcards in user input (used with escape='\\')."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
