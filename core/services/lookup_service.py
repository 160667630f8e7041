# =============================================================================
# core/services/lookup_service.py - Lookup Table Business Logic
# =============================================================================
# Generic CRUD for every table in core.models.lookup.LOOKUPS.
# Lookup tables are shared configuration, so nothing here filters by user.
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
from core.models.lookup import LookupDefinition
from lib.supabase_client import SupabaseClient
from lib.utils import ilike_any, sanitize_search, utc_now_iso

logger = logging.getLogger(__name__)


class LookupService:
    """
    Service for lookup table operations.

    Every method takes the LookupDefinition of the table it works on.
    """

    @staticmethod
    def list_items(
        definition: LookupDefinition,
        params: PaginationParams,
        active: bool | None = None,
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List lookup rows ordered by code.

        Args:
            definition: The lookup table
            params: Page/limit/search
            active: Filter on is_active when given
            filters: Equality filters limited to definition.filter_fields

        Returns:
            Tuple of (rows, total_count)
        """
        client = SupabaseClient.get_client()

        try:
            query = client.table(definition.table).select("*", count="exact")

            search = sanitize_search(params.search)
            if search:
                query = query.or_(ilike_any(definition.search_fields, search))

            if active is not None:
                query = query.eq("is_active", active)

            for column, value in (filters or {}).items():
                if column in definition.filter_fields and value:
                    query = query.eq(column, str(value))

            query = query.order(definition.order_by, desc=False)
            response = params.apply(query).execute()

            return response.data or [], response.count or 0

        except Exception as e:
            logger.error(f"Failed to list {definition.table}: {e}")
            raise

    @staticmethod
    def get_item(definition: LookupDefinition, item_id: str | UUID) -> dict[str, Any]:
        """
        Get one lookup row.

        Raises:
            NotFoundError: If the row doesn't exist
        """
        row = SupabaseClient.fetch_by_id(definition.table, item_id)
        if not row:
            raise NotFoundError(definition.entity, str(item_id))
        return row

    @staticmethod
    def _clean_label(definition: LookupDefinition, value: Any) -> str:
        if value is None or not str(value).strip():
            raise MissingFieldError(definition.label_field)

        label = str(value).strip()
        if not definition.min_label_length <= len(label) <= definition.max_label_length:
            raise ValidationFailedError(
                errors=[{
                    "field": definition.label_field,
                    "message": (
                        f"{definition.label_title} must be between {definition.min_label_length} "
                        f"and {definition.max_label_length} characters"
                    ),
                }]
            )
        return label

    @staticmethod
    def _ensure_unique(
        definition: LookupDefinition,
        label: str,
        scope: dict[str, Any],
        exclude_id: str | None = None,
    ) -> None:
        filters = {definition.label_field: label, **scope}
        if SupabaseClient.exists(definition.table, filters, exclude_id=exclude_id):
            raise DuplicateValueError(
                definition.duplicate_message or f"{definition.entity} already exists",
                field=definition.label_field,
            )

    @staticmethod
    def create_item(
        definition: LookupDefinition,
        payload: dict[str, Any],
        user_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Create a lookup row.

        The label is required and must be unique (within unique_with scope).
        is_active defaults to true.

        Raises:
            MissingFieldError: If the label or a required field is missing
            ValidationFailedError: If the label length is out of range
            DuplicateValueError: If the label is taken
        """
        label = LookupService._clean_label(definition, payload.get(definition.label_field))

        for required in definition.required_fields:
            if not payload.get(required):
                raise MissingFieldError(required)

        scope = {column: payload[column] for column in definition.unique_with}
        LookupService._ensure_unique(definition, label, scope)

        data = {column: payload.get(column) for column in definition.extra_fields}
        data[definition.label_field] = label
        if "is_active" in definition.extra_fields and data.get("is_active") is None:
            data["is_active"] = True
        if user_id is not None:
            data["created_by"] = str(user_id)
            data["updated_by"] = str(user_id)

        client = SupabaseClient.get_client()

        try:
            response = client.table(definition.table).insert(data).execute()
        except Exception as e:
            if SupabaseClient.is_unique_violation(e):
                raise DuplicateValueError(
                    definition.duplicate_message or f"{definition.entity} already exists",
                    field=definition.label_field,
                )
            logger.error(f"Failed to create {definition.table} row: {e}")
            raise

        if not response.data:
            raise Exception("Insert returned no data")

        item = response.data[0]
        logger.info(f"Created {definition.table} row: {item.get('id')}")
        return item

    @staticmethod
    def update_item(
        definition: LookupDefinition,
        item_id: str | UUID,
        payload: dict[str, Any],
        user_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Partially update a lookup row.

        Only writable fields present in the payload are changed. A new
        label is checked for uniqueness against the other rows.

        Raises:
            NotFoundError: If the row doesn't exist
            DuplicateValueError: If the new label is taken by another row
        """
        item_id = str(item_id)
        existing = LookupService.get_item(definition, item_id)

        updates = {
            column: payload[column]
            for column in definition.writable_fields
            if column in payload
        }

        if definition.label_field in updates:
            label = LookupService._clean_label(definition, updates[definition.label_field])
            updates[definition.label_field] = label
            scope = {
                column: updates.get(column, existing.get(column))
                for column in definition.unique_with
            }
            LookupService._ensure_unique(definition, label, scope, exclude_id=item_id)

        updates["updated_at"] = utc_now_iso()
        if user_id is not None:
            updates["updated_by"] = str(user_id)

        client = SupabaseClient.get_client()

        try:
            response = (
                client.table(definition.table)
                .update(updates)
                .eq("id", item_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update {definition.table} row {item_id}: {e}")
            raise

        if not response.data:
            raise NotFoundError(definition.entity, item_id)

        logger.info(f"Updated {definition.table} row: {item_id}")
        return response.data[0]

    @staticmethod
    def delete_item(definition: LookupDefinition, item_id: str | UUID) -> None:
        """
        Delete a lookup row that nothing references.

        Raises:
            NotFoundError: If the row doesn't exist
            ReferencedRecordError: If another table still points at it
        """
        item_id = str(item_id)
        LookupService.get_item(definition, item_id)

        for reference in definition.references:
            if SupabaseClient.exists(reference.table, {reference.column: item_id}):
                raise ReferencedRecordError(reference.message)

        client = SupabaseClient.get_client()

        try:
            client.table(definition.table).delete().eq("id", item_id).execute()
            logger.info(f"Deleted {definition.table} row: {item_id}")
        except Exception as e:
            logger.error(f"Failed to delete {definition.table} row {item_id}: {e}")
            raise

    @staticmethod
    def list_active(table: str, order_by: str = "name", **filters: Any) -> list[dict[str, Any]]:
        """
        All active rows of a small reference table, unpaginated.

        Backs dropdown endpoints such as contract statuses and
        finance transaction types.
        """
        client = SupabaseClient.get_client()

        try:
            query = client.table(table).select("*").eq("is_active", True)
            for column, value in filters.items():
                if value:
                    query = query.eq(column, value)
            response = query.order(order_by, desc=False).execute()
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to list active {table}: {e}")
            raise
