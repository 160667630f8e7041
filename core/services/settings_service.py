# =============================================================================
# core/services/settings_service.py - System Settings
# =============================================================================
# Key/value settings shared by all users (VAT rate, invoice prefixes, ...).
# Keys are unique.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import DuplicateValueError, ValidationFailedError
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("key", "value", "description", "category")


class SettingsService:
    """Service for system settings."""

    @staticmethod
    def list_settings(category: str | None = None) -> list[dict[str, Any]]:
        """Active settings ordered by key."""
        client = SupabaseClient.get_client()

        query = client.table("system_settings").select("*").eq("is_active", True)
        if category:
            query = query.eq("category", category)

        try:
            response = query.order("key", desc=False).execute()
        except Exception as e:
            logger.error(f"Failed to list system settings: {e}")
            raise
        return response.data or []

    @staticmethod
    def create_setting(payload: dict[str, Any], user_id: UUID | str) -> dict[str, Any]:
        """
        Raises:
            ValidationFailedError: If a required field is missing
            DuplicateValueError: If the key already exists
        """
        missing = [field for field in REQUIRED_FIELDS if not payload.get(field)]
        if missing:
            raise ValidationFailedError(f"Missing required fields: {', '.join(REQUIRED_FIELDS)}")

        key = payload["key"]
        duplicate = DuplicateValueError(f'Setting with key "{key}" already exists', field="key")
        if SupabaseClient.exists("system_settings", {"key": key}):
            raise duplicate

        row = {
            "key": key,
            "value": payload["value"],
            "description": payload["description"],
            "category": payload["category"],
            "is_active": payload.get("is_active", True),
            "created_by": str(user_id),
            "updated_by": str(user_id),
        }

        client = SupabaseClient.get_client()
        try:
            response = client.table("system_settings").insert(row).execute()
        except Exception as e:
            if SupabaseClient.is_unique_violation(e):
                raise duplicate
            logger.error(f"Failed to create system setting {key}: {e}")
            raise

        logger.info(f"Created system setting: {key}")
        return response.data[0]

    @staticmethod
    def update_settings(updates: Any, user_id: UUID | str) -> int:
        """
        Apply a batch of {key, value} updates to active settings.

        Returns:
            Number of updates applied

        Raises:
            ValidationFailedError: If updates isn't a list of {key, value}
        """
        if not isinstance(updates, list) or not all(
            isinstance(update, dict) and update.get("key") for update in updates
        ):
            raise ValidationFailedError("Invalid request format")

        client = SupabaseClient.get_client()
        now = utc_now_iso()

        for update in updates:
            (
                client.table("system_settings")
                .update({"value": update.get("value"), "updated_at": now, "updated_by": str(user_id)})
                .eq("key", update["key"])
                .eq("is_active", True)
                .execute()
            )

        logger.info(f"Updated {len(updates)} system settings")
        return len(updates)
