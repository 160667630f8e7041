# =============================================================================
# core/services/export_service.py - Spreadsheet Exports
# =============================================================================
# Builds the downloadable vehicle and customer lists.
#
# Rows are flattened to display columns, loaded into a DataFrame and
# written as CSV. Missing lookups render as "N/A".
# =============================================================================

import io
import logging
from typing import Any
from uuid import UUID

import pandas as pd
from fastapi.responses import StreamingResponse

from app.config import settings
from core.services.customer_service import CUSTOMER_COLUMNS
from core.services.vehicle_service import VEHICLE_DETAIL_COLUMNS, VehicleService
from lib.supabase_client import SupabaseClient
from lib.utils import format_currency, parse_date, today_iso

logger = logging.getLogger(__name__)

VEHICLE_EXPORT_COLUMNS = [
    "Plate Number",
    "Year",
    "Model",
    "Make",
    "Color",
    "Status",
    "Current KM",
    "Sale Price",
    "Branch",
    "Created Date",
]

CUSTOMER_EXPORT_COLUMNS = [
    "Name",
    "ID Number",
    "ID Type",
    "Classification",
    "License Type",
    "Date of Birth",
    "Address",
    "Mobile Number",
    "Nationality",
    "Status",
    "Created Date",
]


def _embedded(row: dict[str, Any], key: str, field: str = "name") -> str:
    value = row.get(key)
    if isinstance(value, dict):
        return value.get(field) or "N/A"
    return "N/A"


def _display_date(value: Any) -> str:
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else "N/A"


def vehicle_export_row(vehicle: dict[str, Any]) -> dict[str, Any]:
    """Flatten a vehicle row to the export columns."""
    price = vehicle.get("expected_sale_price")
    return {
        "Plate Number": vehicle.get("plate_number") or "N/A",
        "Year": vehicle.get("year_of_manufacture") or "N/A",
        "Model": vehicle.get("make_year") or "N/A",
        "Make": _embedded(vehicle, "make"),
        "Color": _embedded(vehicle, "color"),
        "Status": _embedded(vehicle, "status"),
        "Current KM": vehicle.get("mileage") if vehicle.get("mileage") is not None else "N/A",
        "Sale Price": format_currency(price, settings.DEFAULT_CURRENCY) if price is not None else "N/A",
        "Branch": _embedded(vehicle, "branch"),
        "Created Date": _display_date(vehicle.get("created_at")),
    }


def customer_export_row(customer: dict[str, Any]) -> dict[str, Any]:
    """Flatten a customer row to the export columns."""
    return {
        "Name": customer.get("name") or "N/A",
        "ID Number": customer.get("id_number") or "N/A",
        "ID Type": customer.get("id_type") or "N/A",
        "Classification": _embedded(customer, "classification", "classification"),
        "License Type": _embedded(customer, "license_type", "license_type"),
        "Date of Birth": _display_date(customer.get("date_of_birth")),
        "Address": customer.get("address") or "N/A",
        "Mobile Number": customer.get("mobile_number") or "N/A",
        "Nationality": _embedded(customer, "nationality", "nationality"),
        "Status": _embedded(customer, "status"),
        "Created Date": _display_date(customer.get("created_at")),
    }


class ExportService:
    """Service for list exports."""

    @staticmethod
    def _fetch_all(
        table: str,
        columns: str,
        user_id: UUID | str,
        filters: dict[str, Any] | None = None,
        or_filter: str | None = None,
    ) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        query = client.table(table).select(columns).eq("user_id", str(user_id))
        for column, value in (filters or {}).items():
            if value not in (None, "", "all"):
                query = query.eq(column, value)
        if or_filter:
            query = query.or_(or_filter)
        response = query.order("created_at", desc=True).execute()
        return response.data or []

    @staticmethod
    def to_dataframe(rows: list[dict[str, Any]], columns: list[str]) -> pd.DataFrame:
        """Build a DataFrame with a fixed column order, even when empty."""
        return pd.DataFrame(rows, columns=columns)

    @staticmethod
    def vehicles_frame(
        user_id: UUID | str,
        search: str | None = None,
        status_id: str | None = None,
        branch_id: str | None = None,
        year: int | None = None,
    ) -> pd.DataFrame:
        """The fleet as export rows, narrowed by the list page's filters."""
        vehicles = ExportService._fetch_all(
            "vehicles",
            VEHICLE_DETAIL_COLUMNS,
            user_id,
            filters={"status_id": status_id, "branch_id": branch_id, "year_of_manufacture": year},
            or_filter=VehicleService.build_search_filter(search),
        )
        logger.info(f"Exporting {len(vehicles)} vehicles for user: {user_id}")
        return ExportService.to_dataframe(
            [vehicle_export_row(v) for v in vehicles],
            VEHICLE_EXPORT_COLUMNS,
        )

    @staticmethod
    def customers_frame(user_id: UUID | str) -> pd.DataFrame:
        customers = ExportService._fetch_all("customers", CUSTOMER_COLUMNS, user_id)
        logger.info(f"Exporting {len(customers)} customers for user: {user_id}")
        return ExportService.to_dataframe(
            [customer_export_row(c) for c in customers],
            CUSTOMER_EXPORT_COLUMNS,
        )

    @staticmethod
    def csv_response(df: pd.DataFrame, name: str) -> StreamingResponse:
        """
        Stream a DataFrame as a CSV download.

        Args:
            df: Data to export
            name: Filename prefix; today's date is appended

        Returns:
            StreamingResponse with an attachment Content-Disposition
        """
        csv_buffer = io.StringIO()
        df.to_csv(csv_buffer, index=False)
        csv_buffer.seek(0)

        filename = f"{name}_{today_iso()}.csv"

        return StreamingResponse(
            iter([csv_buffer.getvalue()]),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={filename}",
            }
        )
