# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for request validation:
# - common.py: Pagination parameters and list response helpers
# - lookup.py: Declarative lookup table definitions
# - branch.py, vehicle.py, customer.py, company.py: master data
# - contract.py: Contract workflow schemas and status names
# - insurance.py: Insurance options and policies
# - finance.py: Ledger entries and reporting periods
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Common Models - Pagination
# -----------------------------------------------------------------------------
from .common import (
    FETCH_ALL,
    PaginationInfo,
    PaginationParams,
    paginated,
)

# -----------------------------------------------------------------------------
# Master Data Models
# -----------------------------------------------------------------------------
from .branch import BranchCreate, BranchUpdate
from .vehicle import (
    AccidentCreate,
    BranchTransferRequest,
    TotalLossRequest,
    TransferType,
    VehicleCreate,
    VehicleUpdate,
)
from .customer import IdType, UniquenessCheck, validate_customer_data
from .company import CompanyCreate, CompanyUpdate

# -----------------------------------------------------------------------------
# Contract Models - Rental workflow
# -----------------------------------------------------------------------------
from .contract import (
    CancelRequest,
    CloseRequest,
    ContractStatusName,
    ExtensionRequest,
    ExtensionType,
    HoldRequest,
)

# -----------------------------------------------------------------------------
# Insurance and Finance Models
# -----------------------------------------------------------------------------
from .insurance import InsuranceOptionRequest, InsurancePolicyRequest, RentalIncreaseType
from .finance import (
    ExpenseCreate,
    ExpensePeriod,
    IncomeUpdate,
    PaymentStatus,
    PenaltyCreate,
    SummaryPeriod,
    TransactionCategory,
    VehicleReturnCreate,
    VehicleSaleCreate,
)

# -----------------------------------------------------------------------------
# __all__ - Explicit public API
# -----------------------------------------------------------------------------
__all__ = [
    # Common
    "FETCH_ALL",
    "PaginationInfo",
    "PaginationParams",
    "paginated",
    # Master data
    "BranchCreate",
    "BranchUpdate",
    "AccidentCreate",
    "BranchTransferRequest",
    "TotalLossRequest",
    "TransferType",
    "VehicleCreate",
    "VehicleUpdate",
    "IdType",
    "UniquenessCheck",
    "validate_customer_data",
    "CompanyCreate",
    "CompanyUpdate",
    # Contract
    "CancelRequest",
    "CloseRequest",
    "ContractStatusName",
    "ExtensionRequest",
    "ExtensionType",
    "HoldRequest",
    # Insurance
    "InsuranceOptionRequest",
    "InsurancePolicyRequest",
    "RentalIncreaseType",
    # Finance
    "ExpenseCreate",
    "ExpensePeriod",
    "IncomeUpdate",
    "PaymentStatus",
    "PenaltyCreate",
    "SummaryPeriod",
    "TransactionCategory",
    "VehicleReturnCreate",
    "VehicleSaleCreate",
]
