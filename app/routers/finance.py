# =============================================================================
# app/routers/finance.py - Finance Endpoints
# =============================================================================
# Income/expense ledger: transaction types, expenses, income, transaction
# detail, the vehicle transaction table, the dashboard summary, per-customer balances, and the vehicle
# penalty/return/sale shortcuts.
# All endpoints require authentication.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from app.dependencies import PaginationDep
from core.models.common import paginated
from core.models.finance import (
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
from core.services.finance_service import FinanceService
from core.services.lookup_service import LookupService

router = APIRouter()

ExpenseId = Annotated[UUID, Path(description="Expense transaction UUID")]
IncomeId = Annotated[UUID, Path(description="Income transaction UUID")]
CustomerId = Annotated[UUID, Path(description="Customer UUID")]


@router.get("/transaction-types")
async def list_transaction_types(
    user: AuthUser = Depends(get_current_user),
    category: Annotated[TransactionCategory | None, Query()] = None,
):
    """Active transaction types ordered by name, optionally of one category."""
    types = LookupService.list_active(
        "finance_transaction_types",
        order_by="name",
        category=category.value if category else None,
    )
    return {"success": True, "transactionTypes": types}


# =============================================================================
# Expenses
# =============================================================================

@router.post("/expense", status_code=201)
async def create_expense(request: ExpenseCreate, user: AuthUser = Depends(get_current_user)):
    """
    Record an expense.

    transactionType must be the id of an expense-category type.
    """
    transaction = FinanceService.create_expense(request, user.id)
    return {"success": True, "message": "Expense transaction created successfully", "transaction": transaction}


@router.get("/expense")
async def list_expenses(
    pagination: PaginationDep,
    user: AuthUser = Depends(get_current_user),
    transaction_type: Annotated[str | None, Query(alias="transactionType")] = None,
    period: Annotated[ExpensePeriod | None, Query()] = None,
):
    transactions, total = FinanceService.list_expenses(
        user.id,
        pagination,
        transaction_type=transaction_type,
        period=period,
    )
    return paginated("transactions", transactions, pagination, total)


@router.get("/expense/{expense_id}")
async def get_expense(expense_id: ExpenseId, user: AuthUser = Depends(get_current_user)):
    return {"success": True, "expense": FinanceService.get_expense(expense_id, user.id)}


@router.put("/expense/{expense_id}")
async def update_expense(
    expense_id: ExpenseId,
    request: ExpenseCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Replace an expense. 400 if the id belongs to an income transaction."""
    expense = FinanceService.update_expense(expense_id, request, user.id)
    return {"success": True, "message": "Expense updated successfully", "data": {"id": expense["id"]}}


@router.delete("/expense/{expense_id}")
async def delete_expense(expense_id: ExpenseId, user: AuthUser = Depends(get_current_user)):
    FinanceService.delete_expense(expense_id, user.id)
    return {"success": True, "message": "Expense deleted successfully"}


# =============================================================================
# Income
# =============================================================================

@router.get("/income/{income_id}")
async def get_income(income_id: IncomeId, user: AuthUser = Depends(get_current_user)):
    return {"success": True, "income": FinanceService.get_income(income_id, user.id)}


@router.put("/income/{income_id}")
async def update_income(
    income_id: IncomeId,
    request: IncomeUpdate,
    user: AuthUser = Depends(get_current_user),
):
    income = FinanceService.update_income(income_id, request, user.id)
    return {"success": True, "message": "Income updated successfully", "data": {"id": income["id"]}}


@router.delete("/income/{income_id}")
async def delete_income(income_id: IncomeId, user: AuthUser = Depends(get_current_user)):
    FinanceService.delete_income(income_id, user.id)
    return {"success": True, "message": "Income deleted successfully"}


@router.get("/transaction/{transaction_id}")
async def get_transaction(
    transaction_id: Annotated[UUID, Path(description="Transaction UUID")],
    user: AuthUser = Depends(get_current_user),
):
    return {"success": True, "data": FinanceService.get_transaction(transaction_id, user.id)}


# =============================================================================
# Vehicle Transactions
# =============================================================================

@router.get("/vehicle-transactions")
async def list_vehicle_transactions(
    pagination: PaginationDep,
    user: AuthUser = Depends(get_current_user),
    vehicle: Annotated[str | None, Query(description="Vehicle UUID")] = None,
    status: Annotated[PaymentStatus | None, Query()] = None,
    period: Annotated[ExpensePeriod | None, Query()] = None,
):
    """
    Transactions across the fleet, latest first.

    search matches the invoice number and description. Rows carry the
    vehicle plate, make/model/year and customer name.
    """
    transactions, total = FinanceService.list_vehicle_transactions(
        user.id,
        pagination,
        vehicle_id=vehicle,
        status=status,
        period=period,
    )
    return paginated("transactions", transactions, pagination, total)


# =============================================================================
# Summaries
# =============================================================================

@router.get("/summary")
async def get_summary(
    user: AuthUser = Depends(get_current_user),
    period: Annotated[SummaryPeriod, Query()] = SummaryPeriod.ALL,
    branch_id: Annotated[str | None, Query(alias="branchId")] = None,
):
    """Revenue, expenses and net balance since the start of the period."""
    summary = FinanceService.summary(user.id, period=period, branch_id=branch_id)
    return {"success": True, "summary": summary, "period": period.value, "branchId": branch_id}


@router.get("/customer-summary/{customer_id}")
async def get_customer_summary(customer_id: CustomerId, user: AuthUser = Depends(get_current_user)):
    return {"success": True, "data": FinanceService.customer_summary(customer_id, user.id)}


@router.get("/customer-transactions/{customer_id}")
async def list_customer_transactions(
    customer_id: CustomerId,
    pagination: PaginationDep,
    user: AuthUser = Depends(get_current_user),
):
    transactions, total = FinanceService.customer_transactions(customer_id, user.id, pagination)
    return paginated("transactions", transactions, pagination, total)


# =============================================================================
# Vehicle Shortcuts
# =============================================================================

@router.post("/penalty", status_code=201)
async def record_penalty(request: PenaltyCreate, user: AuthUser = Depends(get_current_user)):
    transaction = FinanceService.record_penalty(request, user.id)
    return {
        "success": True,
        "data": {"transactionId": transaction["id"]},
        "message": "Vehicle penalty record created successfully",
    }


@router.post("/return-vehicle", status_code=201)
async def record_vehicle_return(request: VehicleReturnCreate, user: AuthUser = Depends(get_current_user)):
    transaction = FinanceService.record_vehicle_return(request, user.id)
    return {
        "success": True,
        "data": {"transactionId": transaction["id"]},
        "message": "Vehicle return transaction created successfully",
    }


@router.post("/sell-vehicle", status_code=201)
async def record_vehicle_sale(request: VehicleSaleCreate, user: AuthUser = Depends(get_current_user)):
    transaction = FinanceService.record_vehicle_sale(request, user.id)
    return {
        "success": True,
        "data": {"transactionId": transaction["id"]},
        "message": "Vehicle sale transaction created successfully",
    }
