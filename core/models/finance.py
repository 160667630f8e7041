# =============================================================================
# core/models/finance.py - Finance Schemas
# =============================================================================
# Request bodies of the finance screens. Like the insurance screens they
# post camelCase keys; snake_case is accepted too.
#
# Every money movement is a finance_transactions row whose type
# (finance_transaction_types) has a category of "income" or "expense".
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TransactionCategory(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class SummaryPeriod(str, Enum):
    """Rolling windows for the finance dashboard."""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class ExpensePeriod(str, Enum):
    """Calendar windows for the expense and vehicle transaction lists."""
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    THIS_YEAR = "this_year"
    LAST_YEAR = "last_year"
    ALL = "all"


class PaymentStatus(str, Enum):
    """Paid means the transaction is completed; unpaid means pending."""
    PAID = "paid"
    UNPAID = "unpaid"

    @classmethod
    def _missing_(cls, value):
        # The dashboard sends "Paid" / "Unpaid"
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None


class FinanceRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExpenseCreate(FinanceRequest):
    """
    Record an expense. All fields are required.

    Example:
        {
            "amount": 350,
            "date": "2024-03-01",
            "transactionType": "<expense type id>",
            "vehicle": "<vehicle id>",
            "branch": "<branch id>",
            "employee": "Omar",
            "description": "Tyre replacement"
        }
    """

    amount: float = Field(..., gt=0)
    date: str = Field(..., min_length=1)
    transaction_type: str = Field(..., min_length=1, description="finance_transaction_types id")
    vehicle: str = Field(..., min_length=1)
    branch: str = Field(..., min_length=1)
    employee: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class IncomeUpdate(ExpenseCreate):
    """Replace an income transaction. Adds the contract it was earned on."""

    contract: str = Field(..., min_length=1)


class PenaltyCreate(FinanceRequest):
    """A traffic or damage penalty charged against a vehicle."""

    vehicle: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    total_amount: float = Field(..., gt=0)
    net_invoice: float | None = None
    notes: str | None = None
    employee: str | None = None
    vendor: str | None = None
    receipt_number: str | None = None


class VehicleReturnCreate(FinanceRequest):
    """Cost of returning a leased vehicle to its owner."""

    vehicle: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    total_amount: float = Field(..., gt=0)
    notes: str | None = None
    employee: str | None = None
    vendor: str | None = None
    receipt_number: str | None = None


class VehicleSaleCreate(FinanceRequest):
    """Income from selling a vehicle out of the fleet."""

    vehicle: str = Field(..., min_length=1)
    customer_name: str = Field(..., min_length=1, description="Buyer; stored as customer_id")
    date: str = Field(..., min_length=1)
    total_amount: float = Field(..., gt=0)
    notes: str | None = None
    employee: str | None = None
