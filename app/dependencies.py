# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends, Query

from app.config import settings
from core.models.common import PaginationParams


def get_pagination(
    page: Annotated[str | None, Query(description="Page number (1-based)")] = None,
    limit: Annotated[str | None, Query(description="Items per page, or -1 for all")] = None,
    search: Annotated[str | None, Query(description="Free-text search term")] = None,
) -> PaginationParams:
    """
    Parse page/limit/search query parameters.

    Accepts them as strings so malformed values fall back to defaults
    instead of failing the request.
    """
    return PaginationParams.from_query(
        page=page,
        limit=limit,
        search=search,
        default_limit=settings.DEFAULT_PAGE_SIZE,
        max_limit=settings.MAX_PAGE_SIZE,
    )


# Type aliases for dependency injection
PaginationDep = Annotated[PaginationParams, Depends(get_pagination)]
