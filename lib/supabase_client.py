# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides small row helpers used by every service:
# - fetch a row by id (PostgREST "no rows" becomes None)
# - fetch the first row matching equality filters
# - insert / update / delete single rows
# - count rows
#
# Anything more elaborate (joins, or-filters, ranges) is built directly on
# the query builder returned by get_client().
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   listing = SupabaseClient.fetch_by_id("listings", listing_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST error code for "JSON object requested, multiple (or no) rows returned"
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries the table and operation so logs point at the failing query.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


def is_no_rows_error(error: Exception) -> bool:
    """True when a .single() query failed only because nothing matched."""
    return NO_ROWS_CODE in str(error)


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        booking = SupabaseClient.fetch_by_id("bookings", booking_id)
        if booking is None:
            raise NotFoundError("Booking", booking_id)
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses the service_role key which bypasses Row Level Security, so
        every service performs its own ownership checks.

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
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_by_id(
        cls,
        table: str,
        row_id: str | UUID,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a single row by primary key.

        Args:
            table: Table name
            row_id: Row UUID
            columns: PostgREST select string (may embed relations)

        Returns:
            Row dict, or None if not found

        Raises:
            SupabaseClientError: If query fails for any other reason
        """
        client = cls.get_client()
        row_id_str = cls._normalize_uuid(row_id)

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq("id", row_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if is_no_rows_error(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch {table} row: {e}",
                code="FETCH_FAILED",
                details={"table": table, "id": row_id_str},
            )

    @classmethod
    def fetch_first(
        cls,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch the first row matching all equality filters.

        Returns:
            Row dict, or None if nothing matches
        """
        client = cls.get_client()

        try:
            query = client.table(table).select(columns)
            for column, value in filters.items():
                query = query.eq(column, cls._normalize_uuid(value))
            response = query.limit(1).execute()

            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to query {table}: {e}",
                code="QUERY_FAILED",
                details={"table": table, "filters": {k: str(v) for k, v in filters.items()}},
            )

    @classmethod
    def count_rows(cls, table: str, filters: dict[str, Any] | None = None) -> int:
        """Count rows matching equality filters."""
        client = cls.get_client()

        try:
            query = client.table(table).select("id", count="exact")
            for column, value in (filters or {}).items():
                query = query.eq(column, cls._normalize_uuid(value))
            response = query.execute()
            return response.count or 0

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count {table}: {e}",
                code="COUNT_FAILED",
                details={"table": table},
            )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @classmethod
    def insert_row(cls, table: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a row and return it with generated columns.

        Raises:
            SupabaseClientError: If insert fails or returns nothing
        """
        client = cls.get_client()

        try:
            response = client.table(table).insert(data).execute()

            if response.data:
                logger.debug(f"Inserted {table} row {response.data[0].get('id')}")
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"table": table},
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code="INSERT_FAILED",
                details={"table": table},
            )

    @classmethod
    def update_row(
        cls,
        table: str,
        row_id: str | UUID,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update a row by id.

        Returns:
            The updated row, or None if no row matched
        """
        client = cls.get_client()
        row_id_str = cls._normalize_uuid(row_id)

        try:
            response = (
                client.table(table)
                .update(data)
                .eq("id", row_id_str)
                .execute()
            )
            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update {table} row: {e}",
                code="UPDATE_FAILED",
                details={"table": table, "id": row_id_str},
            )

    @classmethod
    def delete_row(cls, table: str, row_id: str | UUID) -> None:
        """Delete a row by id."""
        client = cls.get_client()
        row_id_str = cls._normalize_uuid(row_id)

        try:
            client.table(table).delete().eq("id", row_id_str).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete {table} row: {e}",
                code="DELETE_FAILED",
                details={"table": table, "id": row_id_str},
            )
