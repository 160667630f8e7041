# =============================================================================
# core/models/branch.py - Branch Schemas
# =============================================================================
# A branch is one rental office / location belonging to a user's business.
# Vehicles are assigned to a branch and moved between branches by transfers.
# =============================================================================

from pydantic import BaseModel, Field


class BranchFlags(BaseModel):
    """Boolean capabilities of a branch. All default to false."""

    is_rental_office: bool = False
    has_no_cars: bool = False
    has_cars_and_employees: bool = False
    is_maintenance_center: bool = False
    has_shift_system_support: bool = False
    is_limousine_office: bool = False


class BranchCreate(BranchFlags):
    """
    Schema for creating a branch.

    Example:
        {
            "name": "Riyadh Main",
            "code": "RUH-01",
            "city_region": "Riyadh",
            "is_rental_office": true
        }
    """

    name: str = Field(..., min_length=1, max_length=200)
    code: str = Field(..., min_length=1, max_length=50, description="Unique per user")
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    manager_name: str | None = None
    city_region: str | None = None
    commercial_registration_number: str | None = None
    website: str | None = None
    branch_license_number: str | None = None
    is_active: bool = True


class BranchUpdate(BaseModel):
    """Partial branch update. Only sent fields are written."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    code: str | None = Field(default=None, min_length=1, max_length=50)
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    manager_name: str | None = None
    city_region: str | None = None
    commercial_registration_number: str | None = None
    website: str | None = None
    branch_license_number: str | None = None
    is_rental_office: bool | None = None
    has_no_cars: bool | None = None
    has_cars_and_employees: bool | None = None
    is_maintenance_center: bool | None = None
    has_shift_system_support: bool | None = None
    is_limousine_office: bool | None = None
    is_active: bool | None = None
