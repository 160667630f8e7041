# =============================================================================
# app/routers/search.py - Global Search Endpoint
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.auth import get_current_user, AuthUser
from core.services.search_service import RESULTS_PER_TYPE, SearchService

router = APIRouter()


@router.get("/global-search")
async def global_search(
    user: AuthUser = Depends(get_current_user),
    q: Annotated[str, Query(description="Search term, at least 2 characters")] = "",
    limit: Annotated[int, Query(ge=1, le=20)] = RESULTS_PER_TYPE,
):
    """Up to `limit` matching vehicles, customers and contracts each."""
    return {"success": True, **SearchService.search(q, user.id, limit=limit)}
