# =============================================================================
# core/models/common.py - Shared List Schemas
# =============================================================================
# Pagination is identical across every list endpoint:
# - page: 1-based page number (invalid -> 1)
# - limit: page size (invalid/non-positive -> default, capped at max,
#   -1 -> return every row)
# - search: free-text term
#
# The response always carries:
#   {"page", "limit", "total", "totalPages", "hasNextPage", "hasPrevPage"}
# =============================================================================

import math
from typing import Any

from pydantic import BaseModel, Field

# limit value that disables pagination
FETCH_ALL = -1


class PaginationInfo(BaseModel):
    """Pagination block returned with every list response."""

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    totalPages: int = Field(..., ge=0)
    hasNextPage: bool
    hasPrevPage: bool


class PaginationParams(BaseModel):
    """
    Normalized page/limit/search for a list query.

    Build with `from_query` so raw query-string values get the lenient
    handling clients rely on.
    """

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, description="Page size, or -1 for all rows")
    search: str = Field(default="")

    @classmethod
    def from_query(
        cls,
        page: Any = None,
        limit: Any = None,
        search: str | None = None,
        default_limit: int = 10,
        max_limit: int = 1000,
    ) -> "PaginationParams":
        """
        Parse raw query-string values.

        Example:
            PaginationParams.from_query("2", "abc")    -> page=2, limit=10
            PaginationParams.from_query("1", "5000")   -> limit=1000
            PaginationParams.from_query("1", "-1")     -> limit=-1 (all rows)
        """
        try:
            page_value = int(page) if page not in (None, "") else 1
        except (TypeError, ValueError):
            page_value = 1
        if page_value < 1:
            page_value = 1

        try:
            limit_value = int(limit) if limit not in (None, "") else default_limit
        except (TypeError, ValueError):
            limit_value = default_limit

        if limit_value != FETCH_ALL:
            if limit_value < 1:
                limit_value = default_limit
            limit_value = min(limit_value, max_limit)

        return cls(page=page_value, limit=limit_value, search=(search or "").strip())

    @property
    def fetch_all(self) -> bool:
        return self.limit == FETCH_ALL

    @property
    def offset(self) -> int:
        return 0 if self.fetch_all else (self.page - 1) * self.limit

    def apply(self, query):
        """Apply the PostgREST range for this page (no-op when fetching all)."""
        if self.fetch_all:
            return query
        return query.range(self.offset, self.offset + self.limit - 1)

    def info(self, total: int | None) -> PaginationInfo:
        """Build the pagination block for a result with `total` matching rows."""
        total = total or 0

        if self.fetch_all:
            return PaginationInfo(
                page=1,
                limit=total,
                total=total,
                totalPages=1,
                hasNextPage=False,
                hasPrevPage=False,
            )

        total_pages = math.ceil(total / self.limit)
        return PaginationInfo(
            page=self.page,
            limit=self.limit,
            total=total,
            totalPages=total_pages,
            hasNextPage=self.page < total_pages,
            hasPrevPage=self.page > 1,
        )


def paginated(key: str, rows: list[dict[str, Any]], params: PaginationParams, total: int | None, **extra) -> dict[str, Any]:
    """
    Wrap rows in the standard list envelope.

    Example:
        paginated("vehicles", rows, params, 42)
        -> {"success": True, "vehicles": [...], "pagination": {...}}
    """
    body = {
        "success": True,
        key: rows,
        "pagination": params.info(total).model_dump(),
    }
    body.update(extra)
    return body
