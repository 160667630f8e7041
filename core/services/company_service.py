# =============================================================================
# core/services/company_service.py - Company Business Logic
# =============================================================================
# Company CRUD scoped to the authenticated user.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import DuplicateValueError, NotFoundError, ValidationFailedError
from core.models.common import PaginationParams
from core.models.company import CompanyCreate, CompanyUpdate
from lib.supabase_client import SupabaseClient
from lib.utils import ilike_any, sanitize_search, to_date_string, utc_now_iso

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("company_name", "tax_number", "commercial_registration_number", "email")

DATE_FIELDS = ("license_expiry_date", "establishment_date")

# Column -> message when another company already has the value
UNIQUE_FIELDS = {
    "tax_number": "Tax number already exists",
    "commercial_registration_number": "Commercial registration number already exists",
}

UNIQUE_CHECK_FIELDS = ("tax_number", "commercial_registration_number", "email", "mobile_number")


def _with_mobile(company: dict[str, Any]) -> dict[str, Any]:
    return {**company, "mobile": company.get("mobile_number")}


def _normalize_dates(row: dict[str, Any]) -> dict[str, Any]:
    for field in DATE_FIELDS:
        if field in row:
            row[field] = to_date_string(row[field])
    return row


class CompanyService:
    """Service for company management operations."""

    @staticmethod
    def list_companies(
        user_id: UUID | str,
        params: PaginationParams,
        branch_id: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List the user's companies, newest first.

        Returns:
            Tuple of (companies with a `mobile` alias, total_count)
        """
        client = SupabaseClient.get_client()

        try:
            query = (
                client.table("companies")
                .select("*", count="exact")
                .eq("user_id", str(user_id))
            )
            if branch_id:
                query = query.eq("branch_id", branch_id)

            search = sanitize_search(params.search)
            if search:
                query = query.or_(ilike_any(SEARCH_FIELDS, search))

            response = params.apply(query.order("created_at", desc=True)).execute()

        except Exception as e:
            logger.error(f"Failed to list companies: {e}")
            raise

        return [_with_mobile(c) for c in response.data or []], response.count or 0

    @staticmethod
    def get_company(company_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        """
        Raises:
            NotFoundError: If the company doesn't exist or isn't the user's
        """
        company = SupabaseClient.fetch_by_id("companies", company_id, user_id=user_id)
        if not company:
            raise NotFoundError("Company", str(company_id))
        return _with_mobile(company)

    @staticmethod
    def _ensure_unique(values: dict[str, Any], user_id: UUID | str, exclude_id: str | None = None) -> None:
        for field, message in UNIQUE_FIELDS.items():
            value = values.get(field)
            if value and SupabaseClient.exists(
                "companies",
                {field: value, "user_id": str(user_id)},
                exclude_id=exclude_id,
            ):
                raise DuplicateValueError(message, field=field)

    @staticmethod
    def create_company(data: CompanyCreate, user_id: UUID | str) -> dict[str, Any]:
        """
        Register a company.

        Raises:
            DuplicateValueError: If the tax or CR number is taken
        """
        row = _normalize_dates(data.model_dump(mode="json"))
        CompanyService._ensure_unique(row, user_id)

        row["documents"] = row.get("documents") or []
        row["user_id"] = str(user_id)

        client = SupabaseClient.get_client()

        try:
            response = client.table("companies").insert(row).execute()
        except Exception as e:
            if SupabaseClient.is_unique_violation(e):
                column = SupabaseClient.violated_column(e, tuple(UNIQUE_FIELDS))
                if column:
                    raise DuplicateValueError(UNIQUE_FIELDS[column], field=column)
                raise DuplicateValueError("Company with these details already exists")
            logger.error(f"Failed to create company: {e}")
            raise

        company = response.data[0]
        logger.info(f"Created company: {company['id']} for user: {user_id}")
        return company

    @staticmethod
    def update_company(
        company_id: str | UUID,
        data: CompanyUpdate,
        user_id: UUID | str,
    ) -> dict[str, Any]:
        company_id = str(company_id)
        CompanyService.get_company(company_id, user_id)

        updates = _normalize_dates(data.model_dump(mode="json", exclude_unset=True))
        CompanyService._ensure_unique(updates, user_id, exclude_id=company_id)
        updates["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("companies")
                .update(updates)
                .eq("id", company_id)
                .eq("user_id", str(user_id))
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update company {company_id}: {e}")
            raise

        logger.info(f"Updated company: {company_id}")
        return _with_mobile(response.data[0])

    @staticmethod
    def delete_company(company_id: str | UUID, user_id: UUID | str) -> None:
        company_id = str(company_id)
        CompanyService.get_company(company_id, user_id)

        client = SupabaseClient.get_client()
        (
            client.table("companies")
            .delete()
            .eq("id", company_id)
            .eq("user_id", str(user_id))
            .execute()
        )
        logger.info(f"Deleted company: {company_id}")

    @staticmethod
    def is_value_unique(
        field: str,
        value: str,
        user_id: UUID | str,
        exclude_id: str | UUID | None = None,
    ) -> bool:
        if field not in UNIQUE_CHECK_FIELDS:
            raise ValidationFailedError(f"Field '{field}' cannot be checked for uniqueness")

        return not SupabaseClient.exists(
            "companies",
            {field: value, "user_id": str(user_id)},
            exclude_id=str(exclude_id) if exclude_id else None,
        )
