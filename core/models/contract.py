# =============================================================================
# core/models/contract.py - Contract Schemas
# =============================================================================
# These models define the API contract for rental contract operations:
# - ContractStatusName: workflow status names looked up in contract_statuses
# - HoldRequest / CloseRequest / CancelRequest: status transitions
# - ExtensionRequest: push the end date out by days or by prepaid fees
# - REQUIRED_CONTRACT_FIELDS / UPDATABLE_CONTRACT_FIELDS: column whitelists
#
# Contract rows are wide (customer, vehicle, pricing and inspection
# snapshots), so create/update bodies are plain dicts checked against the
# whitelists below rather than one model per column.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class ContractStatusName(str, Enum):
    """
    Status names the contract workflow depends on.

    Flow: Active -> On Hold -> Active
          Active / On Hold -> Closed
          Active / On Hold -> Cancelled
    Closed and Cancelled are terminal.
    """
    ACTIVE = "Active"
    ON_HOLD = "On Hold"
    CLOSED = "Closed"
    CANCELLED = "Cancelled"


TERMINAL_STATUSES = (ContractStatusName.CLOSED.value, ContractStatusName.CANCELLED.value)


class ExtensionType(str, Enum):
    """How an extension length is expressed."""
    DURATION = "duration"
    FEES = "fees"


# Fields a new contract must carry, checked in this order
REQUIRED_CONTRACT_FIELDS = (
    "start_date",
    "end_date",
    "type",
    "insurance_type",
    "status_id",
    "selected_vehicle_id",
    "vehicle_plate",
    "vehicle_serial_number",
    "daily_rental_rate",
    "hourly_delay_rate",
    "current_km",
    "rental_days",
    "permitted_daily_km",
    "excess_km_rate",
    "payment_method",
    "total_amount",
    "selected_inspector",
    "inspector_name",
)

# Optional snapshot fields copied from the create body when present
OPTIONAL_CONTRACT_FIELDS = (
    "contract_number",
    "tajeer_number",
    "selected_customer_id",
    "customer_name",
    "customer_id_type",
    "customer_id_number",
    "customer_classification",
    "customer_date_of_birth",
    "customer_license_type",
    "customer_address",
)

# Fields a PUT may change; everything else in the body is dropped
UPDATABLE_CONTRACT_FIELDS = (
    "start_date", "end_date", "type", "insurance_type", "status_id",
    "contract_number_type", "contract_number", "tajeer_number",
    "customer_type", "selected_customer_id", "customer_name",
    "customer_id_type", "customer_id_number", "customer_classification",
    "customer_date_of_birth", "customer_license_type", "customer_address",
    "selected_vehicle_id", "vehicle_plate", "vehicle_serial_number",
    "daily_rental_rate", "hourly_delay_rate", "current_km", "rental_days",
    "permitted_daily_km", "excess_km_rate", "payment_method",
    "membership_enabled", "total_amount", "selected_inspector",
    "inspector_name", "documents_count", "documents",
)


class HoldRequest(BaseModel):
    """Put a contract on hold."""
    hold_reason: str = Field(..., min_length=1, example="Customer travelling")
    hold_comments: str | None = None


class CloseRequest(BaseModel):
    """Close a contract and release its vehicle."""
    close_reason: str = Field(..., min_length=1, example="Vehicle returned")
    close_comments: str | None = None


class CancelRequest(BaseModel):
    """Cancel a contract and release its vehicle."""
    cancel_reason: str = Field(..., min_length=1, example="Booking withdrawn")
    cancel_comments: str | None = None


class ExtensionRequest(BaseModel):
    """
    Extend a contract's end date.

    Example (by days):
        {"extension_type": "duration", "duration_days": 3, "payment_method": "cash"}

    Example (by prepaid fees, days = ceil(fee / daily rate)):
        {"extension_type": "fees", "fee_amount": 250, "payment_method": "card"}
    """
    extension_type: ExtensionType
    duration_days: int | None = Field(default=None, gt=0)
    fee_amount: float | None = Field(default=None, gt=0)
    payment_method: str | None = None

    @model_validator(mode="after")
    def check_amount_for_type(self) -> "ExtensionRequest":
        if self.extension_type == ExtensionType.DURATION and not self.duration_days:
            raise ValueError("duration_days is required for a duration extension")
        if self.extension_type == ExtensionType.FEES and not self.fee_amount:
            raise ValueError("fee_amount is required for a fees extension")
        return self
