# =============================================================================
# core/services/customer_service.py - Customer Business Logic
# =============================================================================
# Customer CRUD scoped to the authenticated user.
#
# The form posts lookup selections under their display names
# (nationality, classification, license_type, status); they're stored in
# the *_id foreign-key columns.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import (
    DuplicateValueError,
    MissingFieldError,
    NotFoundError,
    ReferencedRecordError,
    ValidationFailedError,
)
from core.models.common import PaginationParams
from core.models.customer import validate_customer_data
from lib.supabase_client import SupabaseClient
from lib.utils import ilike_any, is_uuid, sanitize_search, utc_now_iso

logger = logging.getLogger(__name__)

CUSTOMER_COLUMNS = (
    "*, "
    "classification:customer_classifications(classification), "
    "license_type:customer_license_types(license_type), "
    "nationality:customer_nationalities(nationality), "
    "status:customer_statuses(name)"
)

SEARCH_FIELDS = ("name", "id_number", "mobile_number")

# Form field -> foreign-key column
LOOKUP_COLUMNS = {
    "nationality": "nationality_id",
    "classification": "classification_id",
    "license_type": "license_type_id",
    "status": "status_id",
}

REQUIRED_FIELDS = ("name", "id_type", "id_number")

UNIQUE_CHECK_FIELDS = (
    "id_number",
    "mobile_number",
    "email",
    "national_id_number",
    "passport_number",
    "border_number",
)

PROTECTED_COLUMNS = ("id", "user_id", "created_at")

ACTIVE_STATUS = "Active"
BLACKLISTED_STATUS = "Blacklisted"


def _to_row(payload: dict[str, Any]) -> dict[str, Any]:
    """Map a form body onto customers columns."""
    row = {}
    for key, value in payload.items():
        if key in PROTECTED_COLUMNS:
            continue
        if key in LOOKUP_COLUMNS:
            # GCC licence type may be free text rather than a lookup id
            if value and not is_uuid(value):
                row[key] = value
                continue
            row[LOOKUP_COLUMNS[key]] = str(value) if value else None
        else:
            row[key] = value
    return row


def _label(value: Any, key: str) -> str:
    """Pull a display label out of an embedded lookup."""
    if isinstance(value, dict):
        return value.get(key) or "N/A"
    return value or "N/A"


def to_list_item(customer: dict[str, Any]) -> dict[str, Any]:
    """Flatten a customer row for the customers table."""
    return {
        "id": customer.get("id"),
        "name": customer.get("name") or "N/A",
        "id_number": customer.get("id_number") or "N/A",
        "mobile": customer.get("mobile_number") or "N/A",
        "classification": _label(customer.get("classification"), "classification"),
        "nationality": _label(customer.get("nationality"), "nationality"),
        "status": _label(customer.get("status"), "name") if customer.get("status") else ACTIVE_STATUS,
        "created_at": customer.get("created_at"),
    }


class CustomerService:
    """
    Service for customer management operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def _status_id(name: str) -> str | None:
        return SupabaseClient.find_id_by_name("customer_statuses", name)

    @staticmethod
    def list_customers(
        user_id: UUID | str,
        params: PaginationParams,
        status: str | None = None,
        classification: str | None = None,
        blacklisted: bool = False,
        branch_id: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List customers, newest first.

        Args:
            user_id: Owner of the customers
            params: Page/limit/search
            status: "all", "active", or a customer status id
            classification: Classification id, or "all"
            blacklisted: Only blacklisted customers
            branch_id: Only customers registered at this branch

        Returns:
            Tuple of (flattened customers, total_count)
        """
        client = SupabaseClient.get_client()

        try:
            query = (
                client.table("customers")
                .select(CUSTOMER_COLUMNS, count="exact")
                .eq("user_id", str(user_id))
            )

            search = sanitize_search(params.search)
            if search:
                query = query.or_(ilike_any(SEARCH_FIELDS, search))

            if status and status != "all":
                status_id = CustomerService._status_id(ACTIVE_STATUS) if status == "active" else status
                if status_id:
                    query = query.eq("status_id", status_id)

            if classification and classification != "all":
                query = query.eq("classification_id", classification)

            if blacklisted:
                blacklisted_id = CustomerService._status_id(BLACKLISTED_STATUS)
                if not blacklisted_id:
                    return [], 0
                query = query.eq("status_id", blacklisted_id)

            if branch_id:
                query = query.eq("branch_id", branch_id)

            response = params.apply(query.order("created_at", desc=True)).execute()

        except Exception as e:
            logger.error(f"Failed to list customers: {e}")
            raise

        return [to_list_item(c) for c in response.data or []], response.count or 0

    @staticmethod
    def summary_stats(user_id: UUID | str) -> dict[str, int]:
        """Total, active and blacklisted customer counts for the user."""
        client = SupabaseClient.get_client()

        def count(status_name: str | None) -> int:
            query = client.table("customers").select("id", count="exact").eq("user_id", str(user_id))
            if status_name:
                status_id = CustomerService._status_id(status_name)
                if not status_id:
                    return 0
                query = query.eq("status_id", status_id)
            return query.limit(1).execute().count or 0

        try:
            return {
                "total": count(None),
                "active": count(ACTIVE_STATUS),
                "blacklisted": count(BLACKLISTED_STATUS),
            }
        except Exception as e:
            logger.warning(f"Failed to compute customer summary: {e}")
            return {"total": 0, "active": 0, "blacklisted": 0}

    @staticmethod
    def get_customer(customer_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        """
        Get one of the user's customers with lookups embedded.

        Raises:
            NotFoundError: If the customer doesn't exist or isn't the user's
        """
        customer = SupabaseClient.fetch_by_id("customers", customer_id, user_id=user_id, columns=CUSTOMER_COLUMNS)
        if not customer:
            raise NotFoundError("Customer", str(customer_id))
        return customer

    @staticmethod
    def _ensure_unique_id_number(id_number: str, user_id: UUID | str, exclude_id: str | None = None) -> None:
        if SupabaseClient.exists(
            "customers",
            {"id_number": id_number, "user_id": str(user_id)},
            exclude_id=exclude_id,
        ):
            raise DuplicateValueError("Customer with this ID number already exists", field="id_number")

    @staticmethod
    def create_customer(payload: dict[str, Any], user_id: UUID | str) -> dict[str, Any]:
        """
        Create a customer.

        Validates the base fields and the fields of the customer's ID type.
        The status defaults to "Active".

        Raises:
            MissingFieldError: If name, id_type or id_number is missing
            ValidationFailedError: With field errors if validation fails
            DuplicateValueError: If the ID number is already registered
        """
        for field in REQUIRED_FIELDS:
            if not payload.get(field):
                raise MissingFieldError(field)

        errors = validate_customer_data(payload)
        if errors:
            raise ValidationFailedError(errors=errors)

        CustomerService._ensure_unique_id_number(payload["id_number"], user_id)

        row = _to_row(payload)
        if not row.get("status_id"):
            row["status_id"] = CustomerService._status_id(ACTIVE_STATUS)
        row["user_id"] = str(user_id)

        client = SupabaseClient.get_client()

        try:
            response = client.table("customers").insert(row).execute()
        except Exception as e:
            if SupabaseClient.is_unique_violation(e):
                raise DuplicateValueError("Customer with this ID number already exists", field="id_number")
            logger.error(f"Failed to create customer: {e}")
            raise

        customer = response.data[0]
        logger.info(f"Created customer: {customer['id']} for user: {user_id}")
        return customer

    @staticmethod
    def update_customer(
        customer_id: str | UUID,
        payload: dict[str, Any],
        user_id: UUID | str,
    ) -> dict[str, Any]:
        """
        Update a customer.

        A body that sets id_type is re-validated in full against that type.
        """
        customer_id = str(customer_id)
        CustomerService.get_customer(customer_id, user_id)

        if "id_type" in payload:
            errors = validate_customer_data(payload)
            if errors:
                raise ValidationFailedError(errors=errors)

        if payload.get("id_number"):
            CustomerService._ensure_unique_id_number(payload["id_number"], user_id, exclude_id=customer_id)

        updates = _to_row(payload)
        updates["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("customers")
                .update(updates)
                .eq("id", customer_id)
                .eq("user_id", str(user_id))
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update customer {customer_id}: {e}")
            raise

        logger.info(f"Updated customer: {customer_id}")
        return response.data[0]

    @staticmethod
    def delete_customer(customer_id: str | UUID, user_id: UUID | str) -> None:
        """
        Delete a customer with no contracts.

        Raises:
            ReferencedRecordError: If contracts reference the customer
        """
        customer_id = str(customer_id)
        CustomerService.get_customer(customer_id, user_id)

        if SupabaseClient.exists("contracts", {"selected_customer_id": customer_id}):
            raise ReferencedRecordError(
                "Cannot delete customer. There are contracts associated with this customer."
            )

        client = SupabaseClient.get_client()
        (
            client.table("customers")
            .delete()
            .eq("id", customer_id)
            .eq("user_id", str(user_id))
            .execute()
        )
        logger.info(f"Deleted customer: {customer_id}")

    @staticmethod
    def is_value_unique(
        field: str,
        value: str,
        user_id: UUID | str,
        exclude_id: str | UUID | None = None,
    ) -> bool:
        """
        Check whether no other customer of the user has this value.

        Raises:
            ValidationFailedError: If field isn't one of UNIQUE_CHECK_FIELDS
        """
        if field not in UNIQUE_CHECK_FIELDS:
            raise ValidationFailedError(f"Field '{field}' cannot be checked for uniqueness")

        return not SupabaseClient.exists(
            "customers",
            {field: value, "user_id": str(user_id)},
            exclude_id=str(exclude_id) if exclude_id else None,
        )
