# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .lookup_service import LookupService
from .branch_service import BranchService
from .vehicle_service import VehicleService
from .customer_service import CustomerService
from .company_service import CompanyService
from .contract_service import ContractService
from .insurance_service import InsuranceService
from .finance_service import FinanceService
from .search_service import SearchService
from .settings_service import SettingsService
from .export_service import ExportService

__all__ = [
    "LookupService",
    "BranchService",
    "VehicleService",
    "CustomerService",
    "CompanyService",
    "ContractService",
    "InsuranceService",
    "FinanceService",
    "SearchService",
    "SettingsService",
    "ExportService",
]
