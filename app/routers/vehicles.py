# =============================================================================
# app/routers/vehicles.py - Vehicle Endpoints
# =============================================================================
# Fleet CRUD plus the per-vehicle sub-resources:
# - branch transfers
# - accidents
# - total loss write-offs
# - maintenance history
# - contracts
# All endpoints require authentication.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from app.dependencies import PaginationDep
from core.models.common import paginated
from core.models.vehicle import (
    AccidentCreate,
    BranchTransferRequest,
    TotalLossRequest,
    TransferType,
    VehicleCreate,
    VehicleUpdate,
)
from core.services.contract_service import ContractService
from core.services.export_service import ExportService
from core.services.vehicle_service import VehicleService

router = APIRouter()

VehicleId = Annotated[UUID, Path(description="Vehicle UUID")]


# =============================================================================
# Fleet
# =============================================================================

@router.get("")
async def list_vehicles(
    pagination: PaginationDep,
    user: AuthUser = Depends(get_current_user),
    plate_number: Annotated[str | None, Query()] = None,
    branch_id: Annotated[str | None, Query()] = None,
    status_id: Annotated[str | None, Query()] = None,
):
    """
    List vehicles with pagination.

    search matches plate, serial, internal reference and the make, model,
    color and status names.
    """
    vehicles, total = VehicleService.list_vehicles(
        user.id,
        pagination,
        plate_number=plate_number,
        branch_id=branch_id,
        status_id=status_id,
    )
    return paginated("vehicles", vehicles, pagination, total)


@router.post("", status_code=201)
async def create_vehicle(request: VehicleCreate, user: AuthUser = Depends(get_current_user)):
    vehicle = VehicleService.create_vehicle(request, user.id)
    return {"success": True, "vehicle": vehicle, "message": "Vehicle created successfully"}


@router.get("/export")
async def export_vehicles(
    user: AuthUser = Depends(get_current_user),
    search: Annotated[str | None, Query()] = None,
    status_id: Annotated[str | None, Query()] = None,
    branch_id: Annotated[str | None, Query()] = None,
    year: Annotated[int | None, Query(description="Year of manufacture")] = None,
):
    """Download the fleet as CSV, with the same filters as the list."""
    df = ExportService.vehicles_frame(
        user.id,
        search=search,
        status_id=status_id,
        branch_id=branch_id,
        year=year,
    )
    return ExportService.csv_response(df, "vehicles")


@router.get("/{vehicle_id}")
async def get_vehicle(
    vehicle_id: VehicleId,
    user: AuthUser = Depends(get_current_user),
    branch_id: Annotated[UUID | None, Query(description="Only return the vehicle if it is in this branch")] = None,
):
    vehicle = VehicleService.get_vehicle(vehicle_id, user.id, branch_id=branch_id)
    return {"success": True, "vehicle": vehicle}


@router.put("/{vehicle_id}")
async def update_vehicle(
    vehicle_id: VehicleId,
    request: VehicleUpdate,
    user: AuthUser = Depends(get_current_user),
):
    vehicle = VehicleService.update_vehicle(vehicle_id, request, user.id)
    return {"success": True, "vehicle": vehicle}


@router.delete("/{vehicle_id}")
async def delete_vehicle(vehicle_id: VehicleId, user: AuthUser = Depends(get_current_user)):
    """Delete a vehicle. Fails with 400 while contracts reference it."""
    VehicleService.delete_vehicle(vehicle_id, user.id)
    return {"success": True, "message": "Vehicle deleted successfully"}


# =============================================================================
# Transfers
# =============================================================================

@router.post("/{vehicle_id}/branch-transfer", status_code=201)
async def transfer_vehicle(
    vehicle_id: VehicleId,
    request: BranchTransferRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Move the vehicle to another active branch and log the transfer."""
    result = VehicleService.transfer_to_branch(vehicle_id, request, user.id)
    return {"success": True, "message": "Vehicle transferred successfully", **result}


@router.get("/{vehicle_id}/transfers")
async def list_transfers(vehicle_id: VehicleId, user: AuthUser = Depends(get_current_user)):
    transfers = VehicleService.list_transfers(vehicle_id, user.id)
    return {"success": True, "transfers": transfers}


@router.delete("/{vehicle_id}/transfers/{transfer_id}")
async def delete_transfer(
    vehicle_id: VehicleId,
    transfer_id: Annotated[UUID, Path(description="Transfer UUID")],
    user: AuthUser = Depends(get_current_user),
):
    VehicleService.delete_transfer(vehicle_id, transfer_id, user.id)
    return {"success": True, "message": "Transfer deleted successfully"}


# =============================================================================
# Accidents
# =============================================================================

@router.get("/{vehicle_id}/accidents")
async def list_accidents(vehicle_id: VehicleId, user: AuthUser = Depends(get_current_user)):
    return {"success": True, "accidents": VehicleService.list_accidents(vehicle_id, user.id)}


@router.post("/{vehicle_id}/accidents", status_code=201)
async def record_accident(
    vehicle_id: VehicleId,
    request: AccidentCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Record an accident; the vehicle is logged as moved to the workshop."""
    accident = VehicleService.record_accident(vehicle_id, request, user.id)
    return {"success": True, "message": "Accident recorded successfully", "accident": accident}


@router.delete("/{vehicle_id}/accidents/{accident_id}")
async def delete_accident(
    vehicle_id: VehicleId,
    accident_id: Annotated[UUID, Path(description="Accident UUID")],
    user: AuthUser = Depends(get_current_user),
):
    VehicleService.delete_accident(vehicle_id, accident_id, user.id)
    return {"success": True, "message": "Accident deleted successfully"}


# =============================================================================
# Total Loss
# =============================================================================

@router.post("/{vehicle_id}/total-loss", status_code=201)
async def mark_total_loss(
    vehicle_id: VehicleId,
    request: TotalLossRequest,
    user: AuthUser = Depends(get_current_user),
):
    result = VehicleService.mark_total_loss(vehicle_id, request, user.id)
    return {"success": True, "message": "Vehicle marked as total loss", "totalLoss": result}


@router.get("/{vehicle_id}/total-loss")
async def list_total_loss(vehicle_id: VehicleId, user: AuthUser = Depends(get_current_user)):
    """Total loss entries from the vehicle's transfer log."""
    records = VehicleService.list_transfers(vehicle_id, user.id, transfer_type=TransferType.TOTAL_LOSS)
    return {"success": True, "totalLoss": records}


# =============================================================================
# History
# =============================================================================

@router.get("/{vehicle_id}/maintenance")
async def get_maintenance(vehicle_id: VehicleId, user: AuthUser = Depends(get_current_user)):
    return {"success": True, "data": VehicleService.get_maintenance_history(vehicle_id, user.id)}


@router.get("/{vehicle_id}/contracts")
async def list_vehicle_contracts(
    vehicle_id: VehicleId,
    pagination: PaginationDep,
    user: AuthUser = Depends(get_current_user),
    status: Annotated[str | None, Query()] = None,
):
    """The vehicle's contracts with status counts."""
    VehicleService.get_vehicle(vehicle_id, user.id, columns="id")
    contracts, total = ContractService.list_contracts(
        user.id,
        pagination,
        status=status,
        filters={"selected_vehicle_id": vehicle_id},
    )
    return paginated(
        "contracts",
        contracts,
        pagination,
        total,
        summary=ContractService.summarize(contracts, total),
    )
