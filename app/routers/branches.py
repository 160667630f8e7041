# =============================================================================
# app/routers/branches.py - Branch CRUD Endpoints
# =============================================================================
# All endpoints require authentication and only see the caller's branches.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from app.dependencies import PaginationDep
from core.models.branch import BranchCreate, BranchUpdate
from core.models.common import paginated
from core.services.branch_service import BranchService

router = APIRouter()


@router.get("")
async def list_branches(
    pagination: PaginationDep,
    user: AuthUser = Depends(get_current_user),
    active: Annotated[bool | None, Query(description="Filter on is_active")] = None,
):
    """
    List branches with pagination.

    Searches name, code, address, manager and city/region.
    """
    branches, total = BranchService.list_branches(user.id, pagination, active=active)
    return paginated("branches", branches, pagination, total)


@router.post("", status_code=201)
async def create_branch(
    request: BranchCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Create a branch. The code must be unique among the user's branches."""
    branch = BranchService.create_branch(request, user.id)
    return {"success": True, "branch": branch}


@router.get("/{branch_id}")
async def get_branch(
    branch_id: Annotated[UUID, Path(description="Branch UUID")],
    user: AuthUser = Depends(get_current_user),
):
    return {"success": True, "branch": BranchService.get_branch(branch_id, user.id)}


@router.put("/{branch_id}")
async def update_branch(
    branch_id: Annotated[UUID, Path(description="Branch UUID")],
    request: BranchUpdate,
    user: AuthUser = Depends(get_current_user),
):
    branch = BranchService.update_branch(branch_id, request, user.id)
    return {"success": True, "branch": branch}


@router.delete("/{branch_id}")
async def delete_branch(
    branch_id: Annotated[UUID, Path(description="Branch UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Delete a branch.

    Fails with 400 while any vehicle is still assigned to the branch.
    """
    BranchService.delete_branch(branch_id, user.id)
    return {"success": True, "message": "Branch deleted successfully"}
