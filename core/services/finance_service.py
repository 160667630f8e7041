# =============================================================================
# core/services/finance_service.py - Finance Business Logic
# =============================================================================
# Income/expense ledger operations:
# - Expense recording and the expense list
# - Expense and income read/replace/delete, each limited to its category
# - The per-vehicle transaction table with paid/unpaid filtering
# - Vehicle penalty, vehicle return and vehicle sale shortcuts, which
#   resolve a fixed transaction type by name
# - Dashboard summary and per-customer balances
#
# Each recorded movement is a finance_transactions row plus a detail row
# in rental_expenses or rental_income. The detail row is best-effort:
# a failure there is logged and the transaction stands.
# =============================================================================

import logging
import random
import time
from datetime import date, timedelta
from typing import Any
from uuid import UUID

import pandas as pd

from app.config import settings
from app.exceptions import NotFoundError, ValidationFailedError
from core.models.common import PaginationParams
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
from lib.supabase_client import SupabaseClient
from lib.utils import format_currency, ilike_any, sanitize_search, to_float, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

EXPENSE_COLUMNS = (
    "*, "
    "transaction_type:finance_transaction_types(name, category), "
    "branch:branches(name), "
    "vehicle:vehicles(plate_number)"
)

INCOME_COLUMNS = (
    "*, "
    "transaction_type:finance_transaction_types(id, name, category), "
    "branch:branches(id, name), "
    "vehicle:vehicles(id, plate_number, make_year), "
    "contract:contracts(id, contract_number, customer_name, start_date, end_date), "
    "customer:customers(id, name, id_type, id_number, mobile_number), "
    "rental_income:rental_income(income_type, source)"
)

EXPENSE_DETAIL_COLUMNS = (
    "*, "
    "transaction_type:finance_transaction_types(id, name, category), "
    "branch:branches(id, name), "
    "vehicle:vehicles(id, plate_number, make_year), "
    "rental_expense:rental_expenses(vendor_name, receipt_number, receipt_date)"
)

EXPENSE_SEARCH_FIELDS = ("description", "employee_name", "transaction_number")
VEHICLE_TRANSACTION_SEARCH_FIELDS = ("transaction_number", "description")

COMPLETED = "completed"
PENDING = "pending"

# Fixed types used by the vehicle shortcuts
PENALTY_TYPE = ("Vehicle Penalty", TransactionCategory.EXPENSE)
RETURN_TYPE = ("Return", TransactionCategory.EXPENSE)
SALE_TYPE = ("Sell", TransactionCategory.INCOME)


# =============================================================================
# Helpers
# =============================================================================

def transaction_number(type_code: str) -> str:
    """
    Build a transaction number: <type code>-<epoch ms>-<3 digit suffix>.

    Example:
        transaction_number("EXP") -> "EXP-1709280000000-042"
    """
    return f"{type_code}-{int(time.time() * 1000)}-{random.randint(0, 999):03d}"


def summary_start(period: SummaryPeriod, today: date) -> date | None:
    """First day included in a rolling summary period; None for all time."""
    if period == SummaryPeriod.TODAY:
        return today
    if period == SummaryPeriod.WEEK:
        return today - timedelta(days=7)
    if period == SummaryPeriod.MONTH:
        return (pd.Timestamp(today) - pd.DateOffset(months=1)).date()
    if period == SummaryPeriod.YEAR:
        return (pd.Timestamp(today) - pd.DateOffset(years=1)).date()
    return None


def expense_period_range(period: ExpensePeriod, today: date) -> tuple[date, date] | None:
    """Inclusive calendar range of an expense-list period; None for all time."""
    first_of_month = today.replace(day=1)

    if period == ExpensePeriod.THIS_MONTH:
        next_month = (pd.Timestamp(first_of_month) + pd.DateOffset(months=1)).date()
        return first_of_month, next_month - timedelta(days=1)
    if period == ExpensePeriod.LAST_MONTH:
        last_month_end = first_of_month - timedelta(days=1)
        return last_month_end.replace(day=1), last_month_end
    if period == ExpensePeriod.THIS_YEAR:
        return date(today.year, 1, 1), date(today.year, 12, 31)
    if period == ExpensePeriod.LAST_YEAR:
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
    return None


def _detail_key(name: str) -> str:
    return name.lower().replace(" ", "_")


def _embedded_name(row: dict[str, Any], key: str) -> str:
    value = row.get(key)
    return value.get("name") or "" if isinstance(value, dict) else ""


def vehicle_transaction_row(
    transaction: dict[str, Any],
    transaction_type: dict[str, Any] | None,
    vehicle: dict[str, Any] | None,
    customer: dict[str, Any] | None,
) -> dict[str, Any]:
    """Flatten a transaction and its related rows into one table row."""
    vehicle = vehicle or {}
    vehicle_info = " ".join(
        str(part) for part in (
            _embedded_name(vehicle, "make"),
            _embedded_name(vehicle, "model"),
            vehicle.get("make_year") or "",
        ) if part
    )
    amount = transaction.get("total_amount")
    if amount is None:
        amount = transaction.get("amount")
    is_paid = transaction.get("status") == COMPLETED

    return {
        "id": transaction["id"],
        "date": transaction.get("transaction_date"),
        "transactionType": (transaction_type or {}).get("name") or "Unknown",
        "vehiclePlate": vehicle.get("plate_number") or "N/A",
        "vehicleInfo": vehicle_info or "N/A",
        "amount": format_currency(amount, transaction.get("currency") or settings.DEFAULT_CURRENCY),
        "invoiceNumber": transaction.get("transaction_number") or "N/A",
        "status": "Paid" if is_paid else "Unpaid",
        "isPaid": is_paid,
        "customerName": (customer or {}).get("name") or "N/A",
        "description": transaction.get("description") or "",
        "transactionTypeId": transaction.get("transaction_type_id"),
        "vehicleId": transaction.get("vehicle_id"),
        "customerId": transaction.get("customer_id"),
    }


class FinanceService:
    """
    Service for finance transactions.

    Provides a clean interface between API routes and database.
    """

    # -------------------------------------------------------------------------
    # Transaction Types
    # -------------------------------------------------------------------------

    @staticmethod
    def _type_by_id(type_id: str, category: TransactionCategory) -> dict[str, Any]:
        """
        Raises:
            ValidationFailedError: If no type of that category has this id
        """
        client = SupabaseClient.get_client()
        response = (
            client.table("finance_transaction_types")
            .select("id, name, code, category")
            .eq("id", str(type_id))
            .eq("category", category.value)
            .limit(1)
            .execute()
        )
        if not response.data:
            raise ValidationFailedError("Invalid transaction type")
        return response.data[0]

    @staticmethod
    def _type_by_name(name: str, category: TransactionCategory) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        response = (
            client.table("finance_transaction_types")
            .select("id, name, code, category")
            .eq("name", name)
            .eq("category", category.value)
            .limit(1)
            .execute()
        )
        if not response.data:
            raise ValidationFailedError("Transaction type not found")
        return response.data[0]

    @staticmethod
    def _type_categories() -> dict[str, str]:
        """Transaction type id -> category."""
        client = SupabaseClient.get_client()
        response = client.table("finance_transaction_types").select("id, category").execute()
        return {row["id"]: row.get("category") for row in response.data or []}

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    @staticmethod
    def _insert_transaction(row: dict[str, Any], user_id: UUID | str) -> dict[str, Any]:
        row.setdefault("currency", settings.DEFAULT_CURRENCY)
        row.setdefault("status", COMPLETED)
        row["user_id"] = str(user_id)

        client = SupabaseClient.get_client()

        try:
            response = client.table("finance_transactions").insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to create finance transaction: {e}")
            raise

        transaction = response.data[0]
        logger.info(f"Created transaction {transaction.get('transaction_number')} for user: {user_id}")
        return transaction

    @staticmethod
    def _insert_detail(table: str, row: dict[str, Any]) -> None:
        client = SupabaseClient.get_client()
        try:
            client.table(table).insert(row).execute()
        except Exception as e:
            logger.warning(f"Transaction {row.get('transaction_id')} saved but {table} row failed: {e}")

    @staticmethod
    def create_expense(request: ExpenseCreate, user_id: UUID | str) -> dict[str, Any]:
        """
        Record an expense against a vehicle and branch.

        Raises:
            ValidationFailedError: If transaction_type isn't an expense type
        """
        expense_type = FinanceService._type_by_id(request.transaction_type, TransactionCategory.EXPENSE)

        transaction = FinanceService._insert_transaction({
            "transaction_number": transaction_number(expense_type["code"]),
            "transaction_type_id": expense_type["id"],
            "amount": request.amount,
            "total_amount": request.amount,
            "net_invoice": request.amount,
            "transaction_date": request.date,
            "description": request.description,
            "branch_id": request.branch,
            "vehicle_id": request.vehicle,
            "employee_name": request.employee,
        }, user_id)

        FinanceService._insert_detail("rental_expenses", {
            "transaction_id": transaction["id"],
            "expense_type": _detail_key(expense_type["name"]),
            "vendor_name": "Internal",
            "receipt_number": f"EXP-{int(time.time() * 1000)}",
            "receipt_date": request.date,
        })
        return transaction

    @staticmethod
    def record_penalty(request: PenaltyCreate, user_id: UUID | str) -> dict[str, Any]:
        penalty_type = FinanceService._type_by_name(*PENALTY_TYPE)

        transaction = FinanceService._insert_transaction({
            "transaction_number": transaction_number(penalty_type["code"]),
            "transaction_type_id": penalty_type["id"],
            "transaction_date": request.date,
            "amount": request.total_amount,
            "total_amount": request.total_amount,
            "net_invoice": request.net_invoice if request.net_invoice is not None else request.total_amount,
            "description": f"{request.reason}: {request.notes or 'Vehicle penalty record'}",
            "employee_name": request.employee or "System",
            "vehicle_id": request.vehicle,
        }, user_id)

        FinanceService._insert_detail("rental_expenses", {
            "transaction_id": transaction["id"],
            "expense_type": "Vehicle Penalty",
            "vendor_name": request.vendor or "Internal",
            "receipt_number": request.receipt_number or "",
            "receipt_date": request.date,
            "user_id": str(user_id),
        })
        return transaction

    @staticmethod
    def record_vehicle_return(request: VehicleReturnCreate, user_id: UUID | str) -> dict[str, Any]:
        return_type = FinanceService._type_by_name(*RETURN_TYPE)

        transaction = FinanceService._insert_transaction({
            "transaction_number": transaction_number(return_type["code"]),
            "transaction_type_id": return_type["id"],
            "transaction_date": request.date,
            "amount": request.total_amount,
            "description": request.notes or "Vehicle return transaction",
            "employee_name": request.employee or "System",
            "vehicle_id": request.vehicle,
        }, user_id)

        FinanceService._insert_detail("rental_expenses", {
            "transaction_id": transaction["id"],
            "expense_type": "Vehicle Return",
            "vendor_name": request.vendor or "Internal",
            "receipt_number": request.receipt_number or "",
            "receipt_date": request.date,
            "user_id": str(user_id),
        })
        return transaction

    @staticmethod
    def record_vehicle_sale(request: VehicleSaleCreate, user_id: UUID | str) -> dict[str, Any]:
        sale_type = FinanceService._type_by_name(*SALE_TYPE)

        transaction = FinanceService._insert_transaction({
            "transaction_number": transaction_number(sale_type["code"]),
            "transaction_type_id": sale_type["id"],
            "transaction_date": request.date,
            "amount": request.total_amount,
            "description": request.notes or "Vehicle sale transaction",
            "employee_name": request.employee or "System",
            "vehicle_id": request.vehicle,
            "customer_id": request.customer_name,
        }, user_id)

        FinanceService._insert_detail("rental_income", {
            "transaction_id": transaction["id"],
            "income_type": "Vehicle Sale",
            "source": "Direct Sale",
            "user_id": str(user_id),
        })
        return transaction

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    @staticmethod
    def list_expenses(
        user_id: UUID | str,
        params: PaginationParams,
        transaction_type: str | None = None,
        period: ExpensePeriod | None = None,
        today: date | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List expense transactions, latest transaction date first.

        Args:
            user_id: Owner of the transactions
            params: Page/limit/search (search covers description,
                employee and transaction number)
            transaction_type: Expense type *name*; "all"/"expense" for every type
            period: Calendar window on transaction_date
            today: Reference date for the period (defaults to today, UTC)

        Returns:
            Tuple of (transactions, total_count)
        """
        client = SupabaseClient.get_client()

        types_response = (
            client.table("finance_transaction_types")
            .select("id, name")
            .eq("category", TransactionCategory.EXPENSE.value)
            .eq("is_active", True)
            .execute()
        )
        expense_types = types_response.data or []
        if not expense_types:
            return [], 0

        query = (
            client.table("finance_transactions")
            .select(EXPENSE_COLUMNS, count="exact")
            .eq("user_id", str(user_id))
            .in_("transaction_type_id", [t["id"] for t in expense_types])
        )

        search = sanitize_search(params.search)
        if search:
            query = query.or_(ilike_any(EXPENSE_SEARCH_FIELDS, search))

        if transaction_type and transaction_type not in ("all", TransactionCategory.EXPENSE.value):
            type_id = next((t["id"] for t in expense_types if t.get("name") == transaction_type), None)
            if type_id:
                query = query.eq("transaction_type_id", type_id)

        if period:
            bounds = expense_period_range(period, today or utc_now().date())
            if bounds:
                query = (
                    query.gte("transaction_date", bounds[0].isoformat())
                    .lte("transaction_date", bounds[1].isoformat())
                )

        try:
            response = params.apply(query.order("transaction_date", desc=True)).execute()
        except Exception as e:
            logger.error(f"Failed to list expenses: {e}")
            raise

        return response.data or [], response.count or 0

    @staticmethod
    def list_vehicle_transactions(
        user_id: UUID | str,
        params: PaginationParams,
        vehicle_id: str | None = None,
        status: PaymentStatus | None = None,
        period: ExpensePeriod | None = None,
        today: date | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Every transaction of the user's fleet, latest first, shaped for the
        vehicle transactions table.

        Args:
            user_id: Owner of the transactions
            params: Page/limit/search (search covers transaction number
                and description)
            vehicle_id: Only this vehicle's transactions
            status: Paid (completed) or unpaid (pending)
            period: Calendar window on transaction_date
            today: Reference date for the period (defaults to today, UTC)

        Returns:
            Tuple of (rows, total_count)
        """
        client = SupabaseClient.get_client()

        query = (
            client.table("finance_transactions")
            .select("*", count="exact")
            .eq("user_id", str(user_id))
        )
        if vehicle_id:
            query = query.eq("vehicle_id", vehicle_id)
        if status:
            query = query.eq("status", COMPLETED if status == PaymentStatus.PAID else PENDING)

        search = sanitize_search(params.search)
        if search:
            query = query.or_(ilike_any(VEHICLE_TRANSACTION_SEARCH_FIELDS, search))

        if period:
            bounds = expense_period_range(period, today or utc_now().date())
            if bounds:
                query = (
                    query.gte("transaction_date", bounds[0].isoformat())
                    .lte("transaction_date", bounds[1].isoformat())
                )

        try:
            response = params.apply(query.order("transaction_date", desc=True)).execute()
        except Exception as e:
            logger.error(f"Failed to list vehicle transactions: {e}")
            raise

        transactions = response.data or []
        types = FinanceService._rows_by_id(
            "finance_transaction_types", "id, name, category",
            [t.get("transaction_type_id") for t in transactions],
        )
        vehicles = FinanceService._rows_by_id(
            "vehicles", "id, plate_number, make_year, make:vehicle_makes!make_id(name), model:vehicle_models!model_id(name)",
            [t.get("vehicle_id") for t in transactions],
        )
        customers = FinanceService._rows_by_id(
            "customers", "id, name",
            [t.get("customer_id") for t in transactions],
        )

        rows = [
            vehicle_transaction_row(
                t,
                types.get(t.get("transaction_type_id")),
                vehicles.get(t.get("vehicle_id")),
                customers.get(t.get("customer_id")),
            )
            for t in transactions
        ]
        return rows, response.count or 0

    @staticmethod
    def _rows_by_id(table: str, columns: str, ids: list[Any]) -> dict[str, dict[str, Any]]:
        """Fetch the rows a page of transactions points at, keyed by id."""
        unique_ids = sorted({str(i) for i in ids if i})
        if not unique_ids:
            return {}
        client = SupabaseClient.get_client()
        response = client.table(table).select(columns).in_("id", unique_ids).execute()
        return {row["id"]: row for row in response.data or []}

    # -------------------------------------------------------------------------
    # Single Transactions (income and expense)
    # -------------------------------------------------------------------------

    @staticmethod
    def _category_of(transaction: dict[str, Any]) -> str | None:
        embedded = transaction.get("transaction_type")
        if isinstance(embedded, dict) and embedded.get("category"):
            return embedded["category"]
        type_id = transaction.get("transaction_type_id")
        if not type_id:
            return None
        return FinanceService._type_categories().get(type_id)

    @staticmethod
    def _fetch_transaction(
        transaction_id: str | UUID,
        user_id: UUID | str,
        category: TransactionCategory,
        columns: str = "*",
    ) -> dict[str, Any]:
        """
        One of the user's transactions, required to be of the given category.

        Raises:
            NotFoundError: If the transaction doesn't exist or isn't the user's
            ValidationFailedError: If it belongs to the other category
        """
        transaction = SupabaseClient.fetch_by_id("finance_transactions", transaction_id, user_id=user_id, columns=columns)
        if not transaction:
            raise NotFoundError(f"{category.value.capitalize()} transaction", str(transaction_id))
        if FinanceService._category_of(transaction) != category.value:
            raise ValidationFailedError(f"Transaction is not an {category.value}")
        return transaction

    @staticmethod
    def _update_transaction(
        transaction_id: str,
        user_id: UUID | str,
        category: TransactionCategory,
        request: ExpenseCreate,
        extra: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        FinanceService._fetch_transaction(transaction_id, user_id, category)
        FinanceService._type_by_id(request.transaction_type, category)

        client = SupabaseClient.get_client()
        response = (
            client.table("finance_transactions")
            .update({
                "amount": request.amount,
                "total_amount": request.amount,
                "transaction_date": request.date,
                "transaction_type_id": request.transaction_type,
                "branch_id": request.branch,
                "vehicle_id": request.vehicle,
                "employee_name": request.employee,
                "description": request.description,
                "updated_at": utc_now_iso(),
                **(extra or {}),
            })
            .eq("id", transaction_id)
            .eq("user_id", str(user_id))
            .execute()
        )
        logger.info(f"Updated {category.value} transaction: {transaction_id}")
        return response.data[0] if response.data else {"id": transaction_id}

    @staticmethod
    def _delete_transaction(transaction_id: str, user_id: UUID | str, category: TransactionCategory) -> None:
        FinanceService._fetch_transaction(transaction_id, user_id, category)

        client = SupabaseClient.get_client()
        (
            client.table("finance_transactions")
            .delete()
            .eq("id", transaction_id)
            .eq("user_id", str(user_id))
            .execute()
        )
        logger.info(f"Deleted {category.value} transaction: {transaction_id}")

    @staticmethod
    def get_income(income_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        return FinanceService._fetch_transaction(income_id, user_id, TransactionCategory.INCOME, INCOME_COLUMNS)

    @staticmethod
    def update_income(income_id: str | UUID, request: IncomeUpdate, user_id: UUID | str) -> dict[str, Any]:
        return FinanceService._update_transaction(
            str(income_id), user_id, TransactionCategory.INCOME, request,
            extra={"contract_id": request.contract},
        )

    @staticmethod
    def delete_income(income_id: str | UUID, user_id: UUID | str) -> None:
        FinanceService._delete_transaction(str(income_id), user_id, TransactionCategory.INCOME)

    @staticmethod
    def get_expense(expense_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        return FinanceService._fetch_transaction(expense_id, user_id, TransactionCategory.EXPENSE, EXPENSE_DETAIL_COLUMNS)

    @staticmethod
    def update_expense(expense_id: str | UUID, request: ExpenseCreate, user_id: UUID | str) -> dict[str, Any]:
        """
        Replace an expense transaction.

        Raises:
            NotFoundError: If the expense doesn't exist
            ValidationFailedError: If it is an income, or the new type isn't
                an expense type
        """
        return FinanceService._update_transaction(str(expense_id), user_id, TransactionCategory.EXPENSE, request)

    @staticmethod
    def delete_expense(expense_id: str | UUID, user_id: UUID | str) -> None:
        FinanceService._delete_transaction(str(expense_id), user_id, TransactionCategory.EXPENSE)

    # -------------------------------------------------------------------------
    # Transaction Detail
    # -------------------------------------------------------------------------

    @staticmethod
    def get_transaction(transaction_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        """
        One transaction shaped for the invoice drawer.

        Amount is display-formatted; status is "Paid" for completed
        transactions and "Unpaid" otherwise.
        """
        transaction = SupabaseClient.fetch_by_id("finance_transactions", transaction_id, user_id=user_id)
        if not transaction:
            raise NotFoundError("Transaction", str(transaction_id))

        transaction_type = None
        if transaction.get("transaction_type_id"):
            transaction_type = SupabaseClient.fetch_by_id(
                "finance_transaction_types",
                transaction["transaction_type_id"],
                columns="id, name, category",
            )

        amount = transaction.get("total_amount")
        if amount is None:
            amount = transaction.get("amount")
        is_paid = transaction.get("status") == COMPLETED

        return {
            "id": transaction["id"],
            "date": transaction.get("transaction_date"),
            "transactionType": (transaction_type or {}).get("name") or "Unknown",
            "category": (transaction_type or {}).get("category"),
            "amount": format_currency(amount, transaction.get("currency") or settings.DEFAULT_CURRENCY),
            "invoiceNumber": transaction.get("transaction_number") or "N/A",
            "status": "Paid" if is_paid else "Unpaid",
            "isPaid": is_paid,
            "description": transaction.get("description") or "",
            "vehicleId": transaction.get("vehicle_id"),
            "customerId": transaction.get("customer_id"),
            "contractId": transaction.get("contract_id"),
            "currency": transaction.get("currency"),
            "totalAmount": transaction.get("total_amount"),
            "totalDiscount": transaction.get("total_discount"),
            "netInvoice": transaction.get("net_invoice"),
            "totalPaid": transaction.get("total_paid"),
            "remainingAmount": transaction.get("remaining_amount"),
            "vatIncluded": transaction.get("vat_included"),
            "vatRate": transaction.get("vat_rate"),
            "vatAmount": transaction.get("vat_amount"),
            "paymentType": transaction.get("payment_type"),
            "employeeName": transaction.get("employee_name"),
            "invoiceDate": transaction.get("invoice_date"),
            "createdAt": transaction.get("created_at"),
            "updatedAt": transaction.get("updated_at"),
        }

    # -------------------------------------------------------------------------
    # Summaries
    # -------------------------------------------------------------------------

    @staticmethod
    def summary(
        user_id: UUID | str,
        period: SummaryPeriod = SummaryPeriod.ALL,
        branch_id: str | None = None,
        today: date | None = None,
    ) -> dict[str, Any]:
        """
        Revenue, expenses and counts for the finance dashboard.

        Returns:
            Dict with totalRevenue, totalExpenses, netBalance, incomeCount,
            expenseCount and totalTransactions
        """
        client = SupabaseClient.get_client()

        query = (
            client.table("finance_transactions")
            .select("id, amount, transaction_date, transaction_type_id")
            .eq("user_id", str(user_id))
        )
        start = summary_start(period, today or utc_now().date())
        if start:
            query = query.gte("transaction_date", start.isoformat())
        if branch_id:
            query = query.eq("branch_id", branch_id)

        transactions = query.execute().data or []
        categories = FinanceService._type_categories()

        income = [t for t in transactions if categories.get(t.get("transaction_type_id")) == TransactionCategory.INCOME.value]
        expenses = [t for t in transactions if categories.get(t.get("transaction_type_id")) == TransactionCategory.EXPENSE.value]

        total_revenue = sum(to_float(t.get("amount")) for t in income)
        total_expenses = sum(to_float(t.get("amount")) for t in expenses)

        return {
            "totalRevenue": total_revenue,
            "totalExpenses": total_expenses,
            "netBalance": total_revenue - total_expenses,
            "incomeCount": len(income),
            "expenseCount": len(expenses),
            "totalTransactions": len(income) + len(expenses),
        }

    @staticmethod
    def customer_summary(customer_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        """
        Balance of one customer.

        Expenses count as invoiced, income as paid. Outstanding never goes
        below zero.
        """
        client = SupabaseClient.get_client()
        transactions = (
            client.table("finance_transactions")
            .select("amount, transaction_type_id")
            .eq("customer_id", str(customer_id))
            .eq("user_id", str(user_id))
            .execute()
        ).data or []
        categories = FinanceService._type_categories()

        total_paid = 0.0
        total_cost = 0.0
        for transaction in transactions:
            category = categories.get(transaction.get("transaction_type_id"))
            if category == TransactionCategory.INCOME.value:
                total_paid += to_float(transaction.get("amount"))
            elif category == TransactionCategory.EXPENSE.value:
                total_cost += to_float(transaction.get("amount"))

        return {
            "totalCost": total_cost,
            "totalPaid": total_paid,
            "outstanding": max(0.0, total_cost - total_paid),
            "transactionCount": len(transactions),
        }

    @staticmethod
    def customer_transactions(
        customer_id: str | UUID,
        user_id: UUID | str,
        params: PaginationParams,
    ) -> tuple[list[dict[str, Any]], int]:
        """A customer's transactions, latest first, flattened for the table."""
        client = SupabaseClient.get_client()
        query = (
            client.table("finance_transactions")
            .select("*, transaction_type:finance_transaction_types(name)", count="exact")
            .eq("customer_id", str(customer_id))
            .eq("user_id", str(user_id))
            .order("transaction_date", desc=True)
        )
        response = params.apply(query).execute()

        rows = [
            {
                "id": t.get("id"),
                "transaction_date": t.get("transaction_date"),
                "transaction_type": (t.get("transaction_type") or {}).get("name") or "Unknown",
                "description": t.get("description") or "",
                "payment_method": t.get("payment_method") or "Unknown",
                "amount": t.get("amount") or 0,
                "invoice_number": t.get("invoice_number") or "",
                "transaction_number": t.get("transaction_number") or "",
                "currency": t.get("currency") or settings.DEFAULT_CURRENCY,
                "created_at": t.get("created_at"),
            }
            for t in response.data or []
        ]
        return rows, response.count or 0
