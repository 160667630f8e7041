# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides the small set of lookups every service repeats:
# - Fetch one row by id (optionally scoped to a user)
# - Existence checks for uniqueness and referential-integrity guards
# - Resolve a status/type row id from its display name
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   vehicle = SupabaseClient.fetch_by_id("vehicles", vehicle_id, user_id=user.id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code for ".single()" matching zero rows
NO_ROWS_CODE = "PGRST116"

# Postgres unique_violation
UNIQUE_VIOLATION_CODE = "23505"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a machine-readable code and a suggestion on how to fix it.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        vehicle = SupabaseClient.fetch_by_id("vehicles", vehicle_id, user_id=user_id)
        taken = SupabaseClient.exists("branches", {"code": "RUH-01", "user_id": user_id})
        on_hold_id = SupabaseClient.find_id_by_name("contract_statuses", "On Hold")
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS), so
        every per-user query must filter on user_id itself.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @staticmethod
    def is_unique_violation(error: Exception) -> bool:
        """Check whether a write failed on a unique constraint."""
        return UNIQUE_VIOLATION_CODE in str(error)

    @staticmethod
    def violated_column(error: Exception, columns: list[str] | tuple[str, ...]) -> str | None:
        """
        Which of the given columns a unique violation names, if any.

        Postgres reports the constraint (e.g. companies_tax_number_key) and
        the key, so the column name appears in the error text.
        """
        text = str(error)
        for column in columns:
            if column in text:
                return column
        return None

    # -------------------------------------------------------------------------
    # Row Lookups
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_by_id(
        cls,
        table: str,
        record_id: str | UUID,
        user_id: str | UUID | None = None,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """
        Fetch a single row by primary key.

        Args:
            table: Table name
            record_id: Row UUID
            user_id: When given, the row must also belong to this user
            columns: PostgREST select string (may embed related tables)
            filters: Extra column -> value equality filters

        Returns:
            Row dict, or None if no row matches

        Raises:
            SupabaseClientError: If query fails for any other reason
        """
        client = cls.get_client()
        record_id_str = normalize_uuid(record_id)

        try:
            query = client.table(table).select(columns).eq("id", record_id_str)
            if user_id is not None:
                query = query.eq("user_id", normalize_uuid(user_id))
            for column, value in (filters or {}).items():
                query = query.eq(column, normalize_uuid(value))

            response = query.single().execute()
            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch {table} row: {e}",
                code="FETCH_ROW_FAILED",
                suggestion=f"Check that the {table} table is accessible",
                details={"table": table, "id": record_id_str}
            )

    @classmethod
    def exists(
        cls,
        table: str,
        filters: dict[str, Any],
        exclude_id: str | UUID | None = None,
    ) -> bool:
        """
        Check whether any row matches all equality filters.

        Args:
            table: Table name
            filters: Column -> value equality filters
            exclude_id: Ignore the row with this id (for update uniqueness)

        Returns:
            True if at least one row matches
        """
        client = cls.get_client()

        try:
            query = client.table(table).select("id")
            for column, value in filters.items():
                query = query.eq(column, normalize_uuid(value))
            if exclude_id is not None:
                query = query.neq("id", normalize_uuid(exclude_id))

            response = query.limit(1).execute()
            return bool(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to check {table} for existing rows: {e}",
                code="EXISTS_CHECK_FAILED",
                details={"table": table, "filters": {k: str(v) for k, v in filters.items()}}
            )

    @classmethod
    def find_id_by_name(
        cls,
        table: str,
        name: str,
        column: str = "name",
        extra_filters: dict[str, Any] | None = None,
    ) -> str | None:
        """
        Resolve a lookup row id from its display name.

        Used for workflow statuses ("On Hold", "Available") and finance
        transaction types ("Vehicle Penalty").

        Returns:
            The row id, or None if no row has that name
        """
        client = cls.get_client()

        try:
            query = client.table(table).select("id").eq(column, name)
            for key, value in (extra_filters or {}).items():
                query = query.eq(key, value)

            response = query.limit(1).execute()
            rows = response.data or []
            return rows[0]["id"] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to resolve {table}.{column} = {name!r}: {e}",
                code="NAME_LOOKUP_FAILED",
                details={"table": table, "name": name}
            )

    @classmethod
    def find_ids_matching(cls, table: str, term: str, column: str = "name") -> list[str]:
        """
        Ids of lookup rows whose column contains term (case-insensitive).

        Lets list endpoints search vehicles by make/model/color name.
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .select("id")
                .ilike(column, f"%{term}%")
                .execute()
            )
            return [row["id"] for row in response.data or []]

        except Exception as e:
            logger.warning(f"Name search on {table} failed: {e}")
            return []
