# =============================================================================
# core/models/company.py - Company Schemas
# =============================================================================
# Corporate customers. Tax number and commercial registration number
# identify a company and are unique.
# =============================================================================

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from core.models.customer import EMAIL_PATTERN


class CompanyBase(BaseModel):
    """Optional company columns shared by create and update."""

    model_config = ConfigDict(extra="ignore")

    country: str | None = None
    city: str | None = None
    address: str | None = None
    license_number: str | None = None
    license_type: str | None = None
    license_expiry_date: str | None = None
    establishment_date: str | None = None
    authorized_person_name: str | None = None
    authorized_person_id: str | None = None
    authorized_person_email: str | None = None
    authorized_person_mobile: str | None = None
    rental_type: str | None = None
    documents: list | None = None


class CompanyCreate(CompanyBase):
    """
    Schema for registering a company.

    Example:
        {
            "company_name": "Acme Trading",
            "tax_number": "300012345600003",
            "commercial_registration_number": "1010123456",
            "mobile_number": "0501234567",
            "email": "fleet@acme.example",
            "branch_id": "..."
        }
    """

    company_name: str = Field(..., min_length=1, max_length=200)
    tax_number: str = Field(..., min_length=1, max_length=50)
    commercial_registration_number: str = Field(..., min_length=1, max_length=50)
    mobile_number: str = Field(..., min_length=1, max_length=20)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    branch_id: UUID


class CompanyUpdate(CompanyBase):
    """Partial company update."""

    company_name: str | None = Field(default=None, min_length=1, max_length=200)
    tax_number: str | None = Field(default=None, min_length=1, max_length=50)
    commercial_registration_number: str | None = Field(default=None, min_length=1, max_length=50)
    mobile_number: str | None = Field(default=None, min_length=1, max_length=20)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    branch_id: UUID | None = None
