# =============================================================================
# core/models/vehicle.py - Vehicle Schemas
# =============================================================================
# These models define the API contract for vehicle operations:
# - VehicleCreate / VehicleUpdate: fleet record CRUD
# - BranchTransferRequest: move a vehicle to another branch
# - AccidentCreate: record an accident (optionally with a maintenance log)
# - TotalLossRequest: write a vehicle off after an insurance settlement
# - TransferType: values of vehicle_transfers.transfer_type
#
# The vehicle form has many more columns than are listed here (pricing,
# registration, documents); those pass through as extra fields.
# =============================================================================

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TransferType(str, Enum):
    """Kinds of rows written to vehicle_transfers."""

    BRANCH_TRANSFER = "branch_transfer"
    ACCIDENT = "accident"
    TOTAL_LOSS = "total_loss"


class VehicleBase(BaseModel):
    """Columns shared by create and update."""

    model_config = ConfigDict(extra="allow")

    internal_reference: str | None = None
    year_of_manufacture: int | None = Field(default=None, ge=1900, le=2100)
    make_id: UUID | None = None
    model_id: UUID | None = None
    color_id: UUID | None = None
    status_id: UUID | None = None
    owner_id: UUID | None = None
    actual_user_id: UUID | None = None
    branch_id: UUID | None = None
    insurance_policy_id: UUID | None = None
    mileage: float | None = Field(default=None, ge=0)
    expected_sale_price: float | None = Field(default=None, ge=0)
    daily_rental_rate: float | None = Field(default=None, ge=0)
    hourly_delay_rate: float | None = Field(default=None, ge=0)
    permitted_daily_km: float | None = Field(default=None, ge=0)
    excess_km_rate: float | None = Field(default=None, ge=0)


class VehicleCreate(VehicleBase):
    """
    Schema for adding a vehicle to the fleet.

    Example:
        {
            "plate_number": "ABC 1234",
            "serial_number": "123456789",
            "make_year": "Camry",
            "plate_registration_type": "Private Transport",
            "year_of_manufacture": 2023
        }
    """

    plate_number: str = Field(..., min_length=1, max_length=20)
    serial_number: str = Field(..., min_length=1, max_length=50)
    make_year: str = Field(..., min_length=1, description="Model/trim label shown on listings")
    plate_registration_type: str = Field(..., min_length=1)


class VehicleUpdate(VehicleBase):
    """Partial vehicle update."""

    plate_number: str | None = Field(default=None, min_length=1, max_length=20)
    serial_number: str | None = Field(default=None, min_length=1, max_length=50)
    make_year: str | None = None
    plate_registration_type: str | None = None


class BranchTransferRequest(BaseModel):
    """Move a vehicle to another of the user's active branches."""

    recipient_branch_id: UUID
    details: str = Field(..., min_length=1)
    transfer_date: str = Field(..., min_length=1, example="2024-03-01")


class AccidentCreate(BaseModel):
    """
    Record an accident.

    The invoice fields are only stored when log_maintenance_update is set.
    """

    accident_date: str = Field(..., min_length=1, example="2024-03-01")
    details: str = Field(..., min_length=1)
    log_maintenance_update: bool = False
    total_amount: float | None = None
    statement_type: str | None = None
    total_discount: float | None = None
    vat: float | None = None
    net_invoice: float | None = None
    total_paid: float | None = None


class TotalLossRequest(BaseModel):
    """Mark a vehicle as a total loss."""

    insurance_company: str = Field(..., min_length=1)
    insurance_amount: float = Field(..., gt=0)
    depreciation_date: str = Field(..., min_length=1, example="2024-03-01")
    details: str = Field(..., min_length=1)
    create_transfer_log: bool = False
    transfer_type: str = "Destroyed"
    from_location: str = "Current Branch"
    to_location: str = "Garbage"
