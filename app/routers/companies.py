# =============================================================================
# app/routers/companies.py - Company Endpoints
# =============================================================================
# All endpoints require authentication and only see the caller's companies.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from app.dependencies import PaginationDep
from core.models.common import paginated
from core.models.company import CompanyCreate, CompanyUpdate
from core.models.customer import UniquenessCheck
from core.services.company_service import CompanyService

router = APIRouter()

CompanyId = Annotated[UUID, Path(description="Company UUID")]


@router.get("")
async def list_companies(
    pagination: PaginationDep,
    user: AuthUser = Depends(get_current_user),
    branch_id: Annotated[str | None, Query()] = None,
):
    """
    List companies with pagination.

    Searches company name, tax number, CR number and email.
    """
    companies, total = CompanyService.list_companies(user.id, pagination, branch_id=branch_id)
    return paginated("companies", companies, pagination, total)


@router.post("", status_code=201)
async def create_company(request: CompanyCreate, user: AuthUser = Depends(get_current_user)):
    company = CompanyService.create_company(request, user.id)
    return {"success": True, "company": company, "message": "Company added successfully"}


@router.post("/check-uniqueness")
async def check_uniqueness(request: UniquenessCheck, user: AuthUser = Depends(get_current_user)):
    is_unique = CompanyService.is_value_unique(request.field, request.value, user.id, request.record_id)
    return {"success": True, "isUnique": is_unique}


@router.get("/{company_id}")
async def get_company(company_id: CompanyId, user: AuthUser = Depends(get_current_user)):
    return {"success": True, "company": CompanyService.get_company(company_id, user.id)}


@router.put("/{company_id}")
async def update_company(
    company_id: CompanyId,
    request: CompanyUpdate,
    user: AuthUser = Depends(get_current_user),
):
    company = CompanyService.update_company(company_id, request, user.id)
    return {"success": True, "company": company}


@router.delete("/{company_id}")
async def delete_company(company_id: CompanyId, user: AuthUser = Depends(get_current_user)):
    CompanyService.delete_company(company_id, user.id)
    return {"success": True, "message": "Company deleted successfully"}
