# =============================================================================
# core/services/branch_service.py - Branch Business Logic
# =============================================================================
# Branch CRUD, scoped to the authenticated user.
# Branch codes are unique per user; a branch with vehicles can't be deleted.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import DuplicateValueError, NotFoundError, ReferencedRecordError
from core.models.branch import BranchCreate, BranchUpdate
from core.models.common import PaginationParams
from lib.supabase_client import SupabaseClient
from lib.utils import ilike_any, sanitize_search, utc_now_iso

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "code", "address", "manager_name", "city_region")


class BranchService:
    """Service for branch management operations."""

    @staticmethod
    def list_branches(
        user_id: UUID | str,
        params: PaginationParams,
        active: bool | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List the user's branches ordered by name.

        Returns:
            Tuple of (branches, total_count)
        """
        client = SupabaseClient.get_client()

        try:
            query = (
                client.table("branches")
                .select("*", count="exact")
                .eq("user_id", str(user_id))
            )

            search = sanitize_search(params.search)
            if search:
                query = query.or_(ilike_any(SEARCH_FIELDS, search))
            if active is not None:
                query = query.eq("is_active", active)

            response = params.apply(query.order("name", desc=False)).execute()
            return response.data or [], response.count or 0

        except Exception as e:
            logger.error(f"Failed to list branches: {e}")
            raise

    @staticmethod
    def get_branch(branch_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        """
        Get a branch owned by the user.

        Raises:
            NotFoundError: If it doesn't exist or belongs to someone else
        """
        branch = SupabaseClient.fetch_by_id("branches", branch_id, user_id=user_id)
        if not branch:
            raise NotFoundError("Branch", str(branch_id))
        return branch

    @staticmethod
    def create_branch(data: BranchCreate, user_id: UUID | str) -> dict[str, Any]:
        """
        Create a branch.

        Raises:
            DuplicateValueError: If the user already has a branch with this code
        """
        if SupabaseClient.exists("branches", {"code": data.code, "user_id": str(user_id)}):
            raise DuplicateValueError("Branch code already exists", field="code")

        row = data.model_dump()
        row["user_id"] = str(user_id)

        client = SupabaseClient.get_client()

        try:
            response = client.table("branches").insert(row).execute()
        except Exception as e:
            if SupabaseClient.is_unique_violation(e):
                raise DuplicateValueError("Branch code already exists", field="code")
            logger.error(f"Failed to create branch: {e}")
            raise

        branch = response.data[0]
        logger.info(f"Created branch: {branch['id']} for user: {user_id}")
        return branch

    @staticmethod
    def update_branch(
        branch_id: str | UUID,
        data: BranchUpdate,
        user_id: UUID | str,
    ) -> dict[str, Any]:
        """
        Update a branch. A changed code must stay unique among the user's branches.
        """
        branch_id = str(branch_id)
        BranchService.get_branch(branch_id, user_id)

        updates = data.model_dump(exclude_unset=True)
        if updates.get("code") and SupabaseClient.exists(
            "branches",
            {"code": updates["code"], "user_id": str(user_id)},
            exclude_id=branch_id,
        ):
            raise DuplicateValueError("Branch code already exists", field="code")

        updates["updated_at"] = utc_now_iso()
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("branches")
                .update(updates)
                .eq("id", branch_id)
                .eq("user_id", str(user_id))
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update branch {branch_id}: {e}")
            raise

        logger.info(f"Updated branch: {branch_id}")
        return response.data[0]

    @staticmethod
    def delete_branch(branch_id: str | UUID, user_id: UUID | str) -> None:
        """
        Delete a branch that has no vehicles.

        Raises:
            ReferencedRecordError: If vehicles are assigned to the branch
        """
        branch_id = str(branch_id)
        BranchService.get_branch(branch_id, user_id)

        if SupabaseClient.exists("vehicles", {"branch_id": branch_id}):
            raise ReferencedRecordError(
                "Cannot delete branch. There are vehicles associated with this branch."
            )

        client = SupabaseClient.get_client()

        try:
            (
                client.table("branches")
                .delete()
                .eq("id", branch_id)
                .eq("user_id", str(user_id))
                .execute()
            )
            logger.info(f"Deleted branch: {branch_id}")
        except Exception as e:
            logger.error(f"Failed to delete branch {branch_id}: {e}")
            raise
