# =============================================================================
# core/services/insurance_service.py - Insurance Business Logic
# =============================================================================
# Insurance options and policies are shared across users. Both are
# soft-deleted: rows with is_active = false are invisible to every
# operation here.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import DuplicateValueError, NotFoundError, ValidationFailedError
from core.models.insurance import InsuranceOptionRequest, InsurancePolicyRequest
from lib.supabase_client import SupabaseClient
from lib.utils import to_date_string, utc_now_iso

logger = logging.getLogger(__name__)


class InsuranceService:
    """Service for insurance options and policies."""

    @staticmethod
    def _list_active(table: str, order_by: str, desc: bool) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table(table)
                .select("*")
                .eq("is_active", True)
                .order(order_by, desc=desc)
                .execute()
            )
            return response.data or []
        except Exception as e:
            logger.error(f"Failed to list {table}: {e}")
            raise

    @staticmethod
    def _update_active(table: str, entity: str, record_id: str | UUID, updates: dict[str, Any]) -> dict[str, Any]:
        """
        Update an active row.

        Raises:
            NotFoundError: If no active row has this id
        """
        client = SupabaseClient.get_client()
        updates["updated_at"] = utc_now_iso()

        response = (
            client.table(table)
            .update(updates)
            .eq("id", str(record_id))
            .eq("is_active", True)
            .execute()
        )
        if not response.data:
            raise NotFoundError(entity, str(record_id))
        return response.data[0]

    # -------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------

    @staticmethod
    def list_options() -> list[dict[str, Any]]:
        """Active insurance options ordered by code."""
        return InsuranceService._list_active("insurance_options", "code", desc=False)

    @staticmethod
    def create_option(request: InsuranceOptionRequest) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        row = request.to_row()
        row["is_active"] = True

        try:
            response = client.table("insurance_options").insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to create insurance option: {e}")
            raise

        option = response.data[0]
        logger.info(f"Created insurance option: {option['id']}")
        return option

    @staticmethod
    def update_option(option_id: str | UUID, request: InsuranceOptionRequest) -> dict[str, Any]:
        option = InsuranceService._update_active(
            "insurance_options", "Insurance option", option_id, request.to_row()
        )
        logger.info(f"Updated insurance option: {option_id}")
        return option

    @staticmethod
    def delete_option(option_id: str | UUID) -> None:
        """Soft-delete an option. A second delete answers 404."""
        InsuranceService._update_active("insurance_options", "Insurance option", option_id, {"is_active": False})
        logger.info(f"Deactivated insurance option: {option_id}")

    # -------------------------------------------------------------------------
    # Policies
    # -------------------------------------------------------------------------

    @staticmethod
    def list_policies() -> list[dict[str, Any]]:
        """Active policies, newest first."""
        return InsuranceService._list_active("insurance_policies", "created_at", desc=True)

    @staticmethod
    def get_policy(policy_id: str | UUID) -> dict[str, Any]:
        policy = SupabaseClient.fetch_by_id("insurance_policies", policy_id)
        if not policy or not policy.get("is_active", True):
            raise NotFoundError("Insurance policy", str(policy_id))
        return policy

    @staticmethod
    def _policy_row(request: InsurancePolicyRequest) -> dict[str, Any]:
        row = request.model_dump()
        row["expiry_date"] = to_date_string(request.expiry_date)
        if row["expiry_date"] is None:
            raise ValidationFailedError(
                errors=[{"field": "expiry_date", "message": "Invalid date"}]
            )
        return row

    @staticmethod
    def _ensure_unique_number(policy_number: str, exclude_id: str | None = None) -> None:
        if SupabaseClient.exists(
            "insurance_policies",
            {"policy_number": policy_number, "is_active": True},
            exclude_id=exclude_id,
        ):
            raise DuplicateValueError("Policy number already exists", field="policy_number", conflict=True)

    @staticmethod
    def create_policy(request: InsurancePolicyRequest) -> dict[str, Any]:
        """
        Raises:
            DuplicateValueError: 409 if an active policy has the number
        """
        row = InsuranceService._policy_row(request)
        InsuranceService._ensure_unique_number(request.policy_number)
        row["is_active"] = True

        client = SupabaseClient.get_client()

        try:
            response = client.table("insurance_policies").insert(row).execute()
        except Exception as e:
            if SupabaseClient.is_unique_violation(e):
                raise DuplicateValueError("Policy number already exists", field="policy_number", conflict=True)
            logger.error(f"Failed to create insurance policy: {e}")
            raise

        policy = response.data[0]
        logger.info(f"Created insurance policy: {policy['id']}")
        return policy

    @staticmethod
    def update_policy(policy_id: str | UUID, request: InsurancePolicyRequest) -> dict[str, Any]:
        row = InsuranceService._policy_row(request)
        InsuranceService._ensure_unique_number(request.policy_number, exclude_id=str(policy_id))

        policy = InsuranceService._update_active("insurance_policies", "Insurance policy", policy_id, row)
        logger.info(f"Updated insurance policy: {policy_id}")
        return policy

    @staticmethod
    def delete_policy(policy_id: str | UUID) -> None:
        InsuranceService._update_active("insurance_policies", "Insurance policy", policy_id, {"is_active": False})
        logger.info(f"Deactivated insurance policy: {policy_id}")
