# =============================================================================
# core/models/insurance.py - Insurance Schemas
# =============================================================================
# - InsuranceOptionRequest: an insurance add-on offered on contracts, which
#   raises the rental either by a fixed value or by a percentage
# - InsurancePolicyRequest: a fleet insurance policy vehicles are covered by
#
# The insurance screens post camelCase bodies; snake_case is accepted too.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RentalIncreaseType(str, Enum):
    VALUE = "value"
    PERCENTAGE = "percentage"


class InsuranceOptionRequest(BaseModel):
    """
    Create/replace an insurance option. All fields are required.

    Example:
        {
            "name": "Full Cover",
            "deductiblePremium": 500,
            "rentalIncreaseType": "percentage",
            "rentalIncreaseValue": 10
        }
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    deductible_premium: float = Field(..., gt=0)
    rental_increase_type: RentalIncreaseType
    rental_increase_value: float = Field(..., gt=0)

    def to_row(self) -> dict:
        """Columns to write; the unused increase column is cleared."""
        is_value = self.rental_increase_type == RentalIncreaseType.VALUE
        return {
            "name": self.name,
            "deductible_premium": self.deductible_premium,
            "rental_increase_type": self.rental_increase_type.value,
            "rental_increase_value": self.rental_increase_value if is_value else None,
            "rental_increase_percentage": None if is_value else self.rental_increase_value,
        }


class InsurancePolicyRequest(BaseModel):
    """
    Create/replace an insurance policy. All fields are required.

    Example:
        {
            "name": "Fleet 2024",
            "policyNumber": "POL-2024-001",
            "policyAmount": 250000,
            "deductiblePremium": 1000,
            "policyType": "Comprehensive",
            "policyCompany": "Tawuniya",
            "expiryDate": "2025-01-01"
        }
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    policy_number: str = Field(..., min_length=1, max_length=100)
    policy_amount: float = Field(..., gt=0)
    deductible_premium: float = Field(..., gt=0)
    policy_type: str = Field(..., min_length=1)
    policy_company: str = Field(..., min_length=1)
    expiry_date: str = Field(..., min_length=1)
