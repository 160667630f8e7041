# =============================================================================
# core/models/customer.py - Customer Schemas
# =============================================================================
# Customer data depends on the kind of identity document presented:
# - National ID: citizen details (ID number, issue/expiry, parents' names)
# - GCC Countries Citizens: ID copy and driving licence details
# - Visitor: border/passport numbers, licence, local address, rental type
# - Resident ID: base fields only
#
# Every customer carries the base fields. validate_customer_data() checks
# the base fields first and, only if they pass, the fields of the ID type.
# =============================================================================

from enum import Enum
from typing import Annotated, Any
from uuid import UUID

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from lib.utils import parse_date


class IdType(str, Enum):
    """Identity document a customer registers with."""
    NATIONAL_ID = "National ID"
    GCC = "GCC Countries Citizens"
    VISITOR = "Visitor"
    RESIDENT_ID = "Resident ID"


def _check_date(value: str) -> str:
    if parse_date(value) is None:
        raise ValueError("Invalid date")
    return value


DateString = Annotated[str, AfterValidator(_check_date)]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CustomerBase(BaseModel):
    """Fields every customer must have, whatever the ID type."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=2, max_length=100)
    id_type: IdType
    nationality: UUID
    mobile_number: str = Field(..., min_length=10, max_length=15)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    branch_id: UUID
    documents: list[Any] | None = None
    documents_count: int | None = None


class NationalIdDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    national_id_number: str = Field(..., min_length=10, max_length=10)
    national_id_issue_date: DateString
    national_id_expiry_date: DateString
    place_of_birth: str = Field(..., min_length=2, max_length=100)
    father_name: str = Field(..., min_length=2, max_length=100)
    mother_name: str = Field(..., min_length=2, max_length=100)


class GccDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id_copy_number: str = Field(..., min_length=1, max_length=50)
    license_expiration_date: DateString
    license_type: str = Field(..., min_length=1)
    place_of_id_issue: str = Field(..., min_length=2, max_length=100)


class VisitorDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    border_number: str = Field(..., min_length=1, max_length=50)
    passport_number: str = Field(..., min_length=1, max_length=50)
    license_number: str = Field(..., min_length=1, max_length=50)
    id_expiry_date: DateString
    license_expiry_date: DateString
    address: str = Field(..., min_length=10, max_length=500)
    rental_type: str = Field(..., min_length=2, max_length=100)
    has_additional_driver: str | None = None


# Resident ID has no extra schema
ID_TYPE_DETAILS: dict[IdType, type[BaseModel]] = {
    IdType.NATIONAL_ID: NationalIdDetails,
    IdType.GCC: GccDetails,
    IdType.VISITOR: VisitorDetails,
}


def _field_errors(error: ValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in item["loc"]),
            "message": item["msg"],
        }
        for item in error.errors()
    ]


def validate_customer_data(data: dict[str, Any]) -> list[dict[str, str]]:
    """
    Validate a customer body against its ID type.

    Returns:
        List of {field, message}; empty when the data is valid

    Example:
        validate_customer_data({"name": "A", ...})
        -> [{"field": "name", "message": "String should have at least 2 characters"}]
    """
    try:
        base = CustomerBase.model_validate(data)
    except ValidationError as e:
        return _field_errors(e)

    details_model = ID_TYPE_DETAILS.get(base.id_type)
    if details_model is None:
        return []

    try:
        details_model.model_validate(data)
    except ValidationError as e:
        return _field_errors(e)

    return []


class UniquenessCheck(BaseModel):
    """Ask whether a value is free for a customer/company field."""

    field: str = Field(..., min_length=1)
    value: str = Field(..., min_length=1)
    record_id: UUID | None = Field(
        default=None,
        validation_alias=AliasChoices("record_id", "customer_id", "company_id", "customerId", "companyId"),
        description="Record being edited, excluded from the check",
    )
