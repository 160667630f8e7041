# =============================================================================
# app/routers/contracts.py - Contract Endpoints
# =============================================================================
# Rental contract CRUD plus the workflow actions (hold, close, cancel,
# extend), the end-date calculator used while drafting, and the
# printable contract view.
# All endpoints require authentication.
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query
from pydantic import BaseModel, Field

from app.auth import get_current_user, AuthUser
from app.dependencies import PaginationDep
from core.models.common import paginated
from core.models.contract import CancelRequest, CloseRequest, ExtensionRequest, HoldRequest
from core.services.contract_service import (
    ContractService,
    calculate_end_date,
    validate_total_fees,
)

router = APIRouter()

ContractId = Annotated[UUID, Path(description="Contract UUID")]


# =============================================================================
# Request/Response Models
# =============================================================================

class EndDateRequest(BaseModel):
    """Inputs of the drafting form's end-date field."""
    start_date: str = Field(..., example="2024-03-01 09:30:00")
    duration_type: str = Field(..., example="fees", description="duration or fees")
    duration_days: int | None = Field(default=None, example=3)
    total_fees: float | None = Field(default=None, example=250)
    daily_rate: float | None = Field(default=None, example=100)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"start_date": "2024-03-01 09:30:00", "duration_type": "duration", "duration_days": 3},
                {"start_date": "2024-03-01 09:30:00", "duration_type": "fees", "total_fees": 250, "daily_rate": 100},
            ]
        }
    }


class EndDateResponse(BaseModel):
    end_date: str | None
    error: str | None = None


# =============================================================================
# Endpoints
# =============================================================================

@router.get("")
async def list_contracts(
    pagination: PaginationDep,
    user: AuthUser = Depends(get_current_user),
    status: Annotated[str | None, Query(description="Status name, or 'all'")] = None,
):
    """
    List contracts with pagination, newest first.

    Each contract carries `status: {name, color}`.
    """
    contracts, total = ContractService.list_contracts(user.id, pagination, status=status)
    return paginated("contracts", contracts, pagination, total)


@router.post("", status_code=201)
async def create_contract(
    payload: Annotated[dict[str, Any], Body()],
    user: AuthUser = Depends(get_current_user),
):
    """
    Create a contract.

    Answers 400 "Missing required field: <name>" for the first missing field.
    """
    contract = ContractService.create_contract(payload, user.id)
    return {"success": True, "contract": contract, "message": "Contract created successfully"}


@router.post("/calculate-end-date", response_model=EndDateResponse)
async def calculate_contract_end_date(
    request: EndDateRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Compute the end date for a draft contract.

    end_date is null when the duration works out to zero days.
    """
    error = None
    if request.duration_type == "fees":
        error = validate_total_fees(request.total_fees, request.daily_rate)

    end_date = calculate_end_date(
        request.start_date,
        request.duration_type,
        duration_days=request.duration_days,
        total_fees=request.total_fees,
        daily_rate=request.daily_rate,
    )
    return EndDateResponse(end_date=end_date, error=error)


@router.get("/{contract_id}")
async def get_contract(contract_id: ContractId, user: AuthUser = Depends(get_current_user)):
    """Get a contract with its status and customer."""
    return {"success": True, "contract": ContractService.get_contract(contract_id, user.id)}


@router.put("/{contract_id}")
async def update_contract(
    contract_id: ContractId,
    payload: Annotated[dict[str, Any], Body()],
    user: AuthUser = Depends(get_current_user),
):
    contract = ContractService.update_contract(contract_id, payload, user.id)
    return {"success": True, "contract": contract}


@router.delete("/{contract_id}")
async def delete_contract(contract_id: ContractId, user: AuthUser = Depends(get_current_user)):
    ContractService.delete_contract(contract_id, user.id)
    return {"success": True, "message": "Contract deleted successfully"}


@router.post("/{contract_id}/hold")
async def hold_contract(
    contract_id: ContractId,
    request: HoldRequest,
    user: AuthUser = Depends(get_current_user),
):
    contract = ContractService.hold_contract(contract_id, user.id, request.hold_reason, request.hold_comments)
    return {"success": True, "message": "Contract has been put on hold successfully", "contract": contract}


@router.post("/{contract_id}/close")
async def close_contract(
    contract_id: ContractId,
    request: CloseRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Close a contract. The vehicle goes back to Available."""
    contract = ContractService.close_contract(contract_id, user.id, request.close_reason, request.close_comments)
    return {"success": True, "message": "Contract has been closed successfully", "contract": contract}


@router.post("/{contract_id}/cancel")
async def cancel_contract(
    contract_id: ContractId,
    request: CancelRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Cancel a contract. The vehicle goes back to Available."""
    contract = ContractService.cancel_contract(contract_id, user.id, request.cancel_reason, request.cancel_comments)
    return {"success": True, "message": "Contract has been cancelled successfully", "contract": contract}


@router.post("/{contract_id}/extend")
async def extend_contract(
    contract_id: ContractId,
    request: ExtensionRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Extend a contract by days, or by the days a fee amount buys.
    """
    contract = ContractService.extend_contract(contract_id, request, user.id)
    return {"success": True, "contract": contract, "message": "Contract extended successfully"}


@router.get("/{contract_id}/print")
async def print_contract(contract_id: ContractId, user: AuthUser = Depends(get_current_user)):
    """Display strings for rendering the contract as a PDF."""
    return {"success": True, "document": ContractService.build_print_view(contract_id, user.id)}
