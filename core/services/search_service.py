# =============================================================================
# core/services/search_service.py - Global Search
# =============================================================================
# Backs the header search box: a handful of vehicles, customers and
# contracts matching a term, each shaped as {id, type, title, subtitle,
# badge, data}.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from core.services.contract_service import SEARCH_FIELDS as CONTRACT_SEARCH_FIELDS
from core.services.vehicle_service import VehicleService
from lib.supabase_client import SupabaseClient
from lib.utils import ilike_any, sanitize_search

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
RESULTS_PER_TYPE = 5

VEHICLE_COLUMNS = (
    "id, plate_number, serial_number, make_year, "
    "make:vehicle_makes!make_id(name), "
    "model:vehicle_models!model_id(name), "
    "status:vehicle_statuses!status_id(name)"
)

CUSTOMER_COLUMNS = (
    "id, name, mobile_number, id_number, address, "
    "classification:customer_classifications(classification), "
    "status:customer_statuses(name)"
)

CUSTOMER_SEARCH_FIELDS = ("name", "mobile_number", "id_number", "address")

CONTRACT_COLUMNS = "id, contract_number, tajeer_number, customer_name, vehicle_plate, vehicle_serial_number"


def _name(value: Any, key: str = "name") -> str:
    if isinstance(value, dict):
        return value.get(key) or "N/A"
    return "N/A"


def vehicle_result(vehicle: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": vehicle["id"],
        "type": "vehicle",
        "title": vehicle.get("plate_number"),
        "subtitle": f"{_name(vehicle.get('make'))} {_name(vehicle.get('model'))} • {vehicle.get('make_year') or 'N/A'}",
        "badge": "Vehicle",
        "data": vehicle,
    }


def customer_result(customer: dict[str, Any]) -> dict[str, Any]:
    classification = _name(customer.get("classification"), "classification")
    return {
        "id": customer["id"],
        "type": "customer",
        "title": customer.get("name"),
        "subtitle": f"{customer.get('mobile_number') or 'N/A'} • {classification}",
        "badge": "Customer",
        "status": customer.get("status"),
        "data": customer,
    }


def contract_result(contract: dict[str, Any]) -> dict[str, Any]:
    title = (
        contract.get("contract_number")
        or contract.get("tajeer_number")
        or f"Contract #{str(contract['id'])[-6:]}"
    )
    return {
        "id": contract["id"],
        "type": "contract",
        "title": title,
        "subtitle": f"{contract.get('customer_name') or 'N/A'} • {contract.get('vehicle_plate') or 'N/A'}",
        "badge": "Contract",
        "data": contract,
    }


class SearchService:
    """Service for the global search box."""

    @staticmethod
    def _search(table: str, columns: str, or_filter: str, user_id: UUID | str, limit: int) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(table)
                .select(columns)
                .eq("user_id", str(user_id))
                .or_(or_filter)
                .limit(limit)
                .execute()
            )
            return response.data or []
        except Exception as e:
            logger.warning(f"Global search on {table} failed: {e}")
            return []

    @staticmethod
    def search(query: str, user_id: UUID | str, limit: int = RESULTS_PER_TYPE) -> dict[str, Any]:
        """
        Search the user's vehicles, customers and contracts.

        Terms shorter than MIN_QUERY_LENGTH return no results. Vehicle
        search also matches make, model, color and status names.

        Returns:
            Dict with results {vehicles, customers, contracts},
            totalResults and the query echoed back
        """
        term = sanitize_search(query)
        results: dict[str, list[dict[str, Any]]] = {"vehicles": [], "customers": [], "contracts": []}

        if len(term) >= MIN_QUERY_LENGTH:
            vehicle_filter = VehicleService.build_search_filter(term)
            results["vehicles"] = [
                vehicle_result(v)
                for v in SearchService._search("vehicles", VEHICLE_COLUMNS, vehicle_filter, user_id, limit)
            ]
            results["customers"] = [
                customer_result(c)
                for c in SearchService._search(
                    "customers", CUSTOMER_COLUMNS, ilike_any(CUSTOMER_SEARCH_FIELDS, term), user_id, limit
                )
            ]
            results["contracts"] = [
                contract_result(c)
                for c in SearchService._search(
                    "contracts", CONTRACT_COLUMNS, ilike_any(CONTRACT_SEARCH_FIELDS, term), user_id, limit
                )
            ]

        return {
            "results": results,
            "totalResults": sum(len(items) for items in results.values()),
            "query": query,
        }
