# =============================================================================
# app/routers/customers.py - Customer Endpoints
# =============================================================================
# Customer CRUD, the uniqueness check used by the customer form, the
# customer's contracts, and the CSV export.
# All endpoints require authentication.
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from app.dependencies import PaginationDep
from core.models.common import paginated
from core.models.customer import UniquenessCheck
from core.services.contract_service import ContractService
from core.services.customer_service import CustomerService
from core.services.export_service import ExportService

router = APIRouter()

CustomerId = Annotated[UUID, Path(description="Customer UUID")]


@router.get("")
async def list_customers(
    pagination: PaginationDep,
    user: AuthUser = Depends(get_current_user),
    status: Annotated[str | None, Query(description="'all', 'active', or a status id")] = None,
    classification: Annotated[str | None, Query(description="Classification id")] = None,
    blacklisted: Annotated[bool, Query(description="Only blacklisted customers")] = False,
    branch_id: Annotated[str | None, Query()] = None,
):
    """
    List customers with pagination and summary counts.

    Searches name, ID number and mobile number.
    """
    customers, total = CustomerService.list_customers(
        user.id,
        pagination,
        status=status,
        classification=classification,
        blacklisted=blacklisted,
        branch_id=branch_id,
    )
    summary = CustomerService.summary_stats(user.id)
    summary["withDues"] = 0
    return paginated("customers", customers, pagination, total, summaryStats=summary)


@router.post("", status_code=201)
async def create_customer(
    payload: Annotated[dict[str, Any], Body()],
    user: AuthUser = Depends(get_current_user),
):
    """
    Create a customer.

    The body is validated against the fields its id_type requires;
    failures come back as 400 with per-field details.
    """
    customer = CustomerService.create_customer(payload, user.id)
    return {"success": True, "customer": customer, "message": "Customer created successfully"}


@router.post("/check-uniqueness")
async def check_uniqueness(
    request: UniquenessCheck,
    user: AuthUser = Depends(get_current_user),
):
    is_unique = CustomerService.is_value_unique(request.field, request.value, user.id, request.record_id)
    return {"success": True, "isUnique": is_unique}


@router.get("/export")
async def export_customers(user: AuthUser = Depends(get_current_user)):
    """Download all of the user's customers as CSV."""
    return ExportService.csv_response(ExportService.customers_frame(user.id), "customers")


@router.get("/{customer_id}")
async def get_customer(customer_id: CustomerId, user: AuthUser = Depends(get_current_user)):
    return {"success": True, "customer": CustomerService.get_customer(customer_id, user.id)}


@router.put("/{customer_id}")
async def update_customer(
    customer_id: CustomerId,
    payload: Annotated[dict[str, Any], Body()],
    user: AuthUser = Depends(get_current_user),
):
    customer = CustomerService.update_customer(customer_id, payload, user.id)
    return {"success": True, "customer": customer}


@router.delete("/{customer_id}")
async def delete_customer(customer_id: CustomerId, user: AuthUser = Depends(get_current_user)):
    """Delete a customer. Fails with 400 while contracts reference them."""
    CustomerService.delete_customer(customer_id, user.id)
    return {"success": True, "message": "Customer deleted successfully"}


@router.get("/{customer_id}/contracts")
async def list_customer_contracts(
    customer_id: CustomerId,
    pagination: PaginationDep,
    user: AuthUser = Depends(get_current_user),
    status: Annotated[str | None, Query()] = None,
):
    """The customer's contracts with status counts."""
    CustomerService.get_customer(customer_id, user.id)
    contracts, total = ContractService.list_contracts(
        user.id,
        pagination,
        status=status,
        filters={"selected_customer_id": customer_id},
    )
    return paginated(
        "contracts",
        contracts,
        pagination,
        total,
        summary=ContractService.summarize(contracts, total),
    )
