# =============================================================================
# core/services/contract_service.py - Contract Business Logic
# =============================================================================
# Handles rental contracts:
# - CRUD with required-field checks and an update whitelist
# - Status transitions (hold, close, cancel) by status *name*
# - End-date extensions by days or by prepaid fees
# - End-date calculation used while a contract is being drafted
# - The printable view of a contract
#
# Closing or cancelling a contract releases its vehicle back to
# "Available". That release is best-effort: the contract transition
# stands even if the vehicle update fails.
# =============================================================================

import logging
import math
from datetime import timedelta
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import (
    DatabaseError,
    InvalidStateTransitionError,
    MissingFieldError,
    NotFoundError,
    StatusNotConfiguredError,
    ValidationFailedError,
)
from core.models.common import PaginationParams
from core.models.contract import (
    OPTIONAL_CONTRACT_FIELDS,
    REQUIRED_CONTRACT_FIELDS,
    TERMINAL_STATUSES,
    UPDATABLE_CONTRACT_FIELDS,
    ContractStatusName,
    ExtensionRequest,
    ExtensionType,
)
from lib.supabase_client import SupabaseClient
from lib.utils import (
    format_currency,
    ilike_any,
    parse_date,
    parse_datetime,
    sanitize_search,
    to_float,
    to_int,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("contract_number", "tajeer_number", "customer_name", "vehicle_plate")

AVAILABLE_VEHICLE_STATUS = "Available"

END_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# =============================================================================
# End-Date Arithmetic
# =============================================================================

def days_from_fees(total_fees: Any, daily_rate: Any) -> int:
    """
    Whole rental days covered by a prepaid amount.

    Any partial day counts as a full day. A zero or missing daily rate
    covers nothing.

    Example:
        days_from_fees(250, 100) -> 3
    """
    rate = to_float(daily_rate)
    if rate <= 0:
        return 0
    return math.ceil(to_float(total_fees) / rate)


def calculate_end_date(
    start_date: Any,
    duration_type: str | None,
    duration_days: Any = None,
    total_fees: Any = None,
    daily_rate: Any = None,
) -> str | None:
    """
    Compute a contract end date from its start and duration.

    Args:
        start_date: Start as ISO string or datetime
        duration_type: "duration" (explicit days) or "fees" (days bought)
        duration_days: Days for a duration contract
        total_fees: Prepaid amount for a fees contract
        daily_rate: Vehicle daily rate for a fees contract

    Returns:
        "YYYY-MM-DD HH:MM:SS" keeping the start's time of day, or None when
        the start is missing/unparseable or the duration is not positive
    """
    start = parse_datetime(start_date)
    if start is None or not duration_type:
        return None

    if duration_type == ExtensionType.DURATION.value:
        days = to_int(duration_days)
    elif duration_type == ExtensionType.FEES.value:
        days = days_from_fees(total_fees, daily_rate)
    else:
        days = 0

    if days <= 0:
        return None

    return (start + timedelta(days=days)).strftime(END_DATE_FORMAT)


def validate_total_fees(total_fees: Any, daily_rate: Any) -> str | None:
    """
    Check that a prepaid amount buys at least one day.

    Returns:
        Error message, or None when the fees are acceptable
    """
    if total_fees in (None, "") or daily_rate in (None, ""):
        return None
    if to_float(total_fees) < to_float(daily_rate):
        return "Total fees must be equal or greater than vehicle daily rate"
    return None


def _attach_statuses(contracts: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Add status {name, color} to each contract with one status query."""
    status_ids = sorted({str(c["status_id"]) for c in contracts if c.get("status_id")})
    statuses: dict[str, dict[str, Any]] = {}

    if status_ids:
        client = SupabaseClient.get_client()
        response = (
            client.table("contract_statuses")
            .select("id, name, color")
            .in_("id", status_ids)
            .execute()
        )
        statuses = {str(row["id"]): row for row in response.data or []}

    for contract in contracts:
        status = statuses.get(str(contract.get("status_id")))
        contract["status"] = {"name": status.get("name"), "color": status.get("color")} if status else None
    return contracts


class ContractService:
    """
    Service for rental contract operations.

    All contracts are scoped to the authenticated user.
    """

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    @staticmethod
    def create_contract(payload: dict[str, Any], user_id: UUID | str) -> dict[str, Any]:
        """
        Create a contract from the drafting form.

        Args:
            payload: Contract body; see REQUIRED_CONTRACT_FIELDS
            user_id: The user creating the contract

        Returns:
            The created contract row

        Raises:
            MissingFieldError: On the first required field that is absent
            ValidationFailedError: If the end date precedes the start date
        """
        for field in REQUIRED_CONTRACT_FIELDS:
            if payload.get(field) is None or payload.get(field) == "":
                raise MissingFieldError(field)

        start = parse_date(payload["start_date"])
        end = parse_date(payload["end_date"])
        if start is None or end is None:
            raise ValidationFailedError("Invalid start or end date")
        if end < start:
            raise ValidationFailedError("End date cannot be before start date")

        data = {field: payload.get(field) or None for field in OPTIONAL_CONTRACT_FIELDS}
        data.update({
            "start_date": payload["start_date"],
            "end_date": payload["end_date"],
            "type": payload["type"],
            "insurance_type": payload["insurance_type"],
            "status_id": payload["status_id"],
            "contract_number_type": payload.get("contract_number_type") or "dynamic",
            "customer_type": payload.get("customer_type") or "existing",
            "selected_vehicle_id": payload["selected_vehicle_id"],
            "vehicle_plate": payload["vehicle_plate"],
            "vehicle_serial_number": payload["vehicle_serial_number"],
            "daily_rental_rate": to_float(payload["daily_rental_rate"]),
            "hourly_delay_rate": to_float(payload["hourly_delay_rate"]),
            "current_km": str(payload.get("current_km") or "0"),
            "rental_days": to_int(payload["rental_days"]),
            "permitted_daily_km": to_int(payload["permitted_daily_km"]),
            "excess_km_rate": to_float(payload["excess_km_rate"]),
            "payment_method": payload.get("payment_method") or "cash",
            "membership_enabled": bool(payload.get("membership_enabled")),
            "total_amount": to_float(payload["total_amount"]),
            "selected_inspector": payload["selected_inspector"],
            "inspector_name": payload["inspector_name"],
            "documents_count": to_int(payload.get("documents_count")),
            "documents": payload.get("documents") or [],
            "user_id": str(user_id),
            "created_by": str(user_id),
            "updated_by": str(user_id),
        })

        client = SupabaseClient.get_client()

        try:
            response = client.table("contracts").insert(data).execute()
        except Exception as e:
            logger.error(f"Failed to create contract: {e}")
            raise DatabaseError("create contract", str(e))

        contract = response.data[0]
        logger.info(f"Created contract: {contract['id']} for vehicle {data['selected_vehicle_id']}")
        return contract

    @staticmethod
    def _fetch_contract(contract_id: str | UUID, user_id: UUID | str, columns: str = "*") -> dict[str, Any]:
        contract = SupabaseClient.fetch_by_id("contracts", contract_id, user_id=user_id, columns=columns)
        if not contract:
            raise NotFoundError("Contract", str(contract_id))
        return contract

    @staticmethod
    def get_contract(contract_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        """
        Get a contract with its status and customer.

        Returns:
            Contract dict with `status` ({name, color} or None) and
            `customer` (row or None)
        """
        contract = ContractService._fetch_contract(contract_id, user_id)
        _attach_statuses([contract])

        contract["customer"] = None
        if contract.get("selected_customer_id"):
            contract["customer"] = SupabaseClient.fetch_by_id(
                "customers",
                contract["selected_customer_id"],
                user_id=user_id,
            )

        return contract

    @staticmethod
    def update_contract(
        contract_id: str | UUID,
        payload: dict[str, Any],
        user_id: UUID | str,
    ) -> dict[str, Any]:
        """
        Update a contract. Only UPDATABLE_CONTRACT_FIELDS are written.

        Raises:
            ValidationFailedError: If the body has no updatable field
        """
        contract_id = str(contract_id)
        ContractService._fetch_contract(contract_id, user_id, columns="id")

        updates = {field: payload[field] for field in UPDATABLE_CONTRACT_FIELDS if field in payload}
        if not updates:
            raise ValidationFailedError("No updatable fields provided")

        updates["updated_by"] = str(user_id)
        updates["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("contracts")
                .update(updates)
                .eq("id", contract_id)
                .eq("user_id", str(user_id))
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update contract {contract_id}: {e}")
            raise DatabaseError("update contract", str(e))

        logger.info(f"Updated contract: {contract_id} ({', '.join(sorted(updates))})")
        return response.data[0]

    @staticmethod
    def delete_contract(contract_id: str | UUID, user_id: UUID | str) -> None:
        contract_id = str(contract_id)
        ContractService._fetch_contract(contract_id, user_id, columns="id")

        client = SupabaseClient.get_client()
        (
            client.table("contracts")
            .delete()
            .eq("id", contract_id)
            .eq("user_id", str(user_id))
            .execute()
        )
        logger.info(f"Deleted contract: {contract_id}")

    @staticmethod
    def _status_filter_id(status: str | None) -> str | None:
        if not status or status == "all":
            return None
        status_id = SupabaseClient.find_id_by_name("contract_statuses", status)
        if not status_id:
            raise ValidationFailedError(f"Invalid status: {status}")
        return status_id

    @staticmethod
    def list_contracts(
        user_id: UUID | str,
        params: PaginationParams,
        status: str | None = None,
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List contracts, newest first, each with its status attached.

        Args:
            user_id: Owner of the contracts
            params: Page/limit/search (search covers number, Tajeer
                number, customer name and plate)
            status: Status name, or "all"
            filters: Extra equality filters (e.g. selected_vehicle_id)

        Returns:
            Tuple of (contracts, total_count)

        Raises:
            ValidationFailedError: If the status name doesn't exist
        """
        status_id = ContractService._status_filter_id(status)
        client = SupabaseClient.get_client()

        try:
            query = (
                client.table("contracts")
                .select("*", count="exact")
                .eq("user_id", str(user_id))
            )
            for column, value in (filters or {}).items():
                query = query.eq(column, str(value))

            search = sanitize_search(params.search)
            if search:
                query = query.or_(ilike_any(SEARCH_FIELDS, search))
            if status_id:
                query = query.eq("status_id", status_id)

            response = params.apply(query.order("created_at", desc=True)).execute()

        except Exception as e:
            logger.error(f"Failed to list contracts: {e}")
            raise

        return _attach_statuses(response.data or []), response.count or 0

    @staticmethod
    def summarize(contracts: list[dict[str, Any]], total: int) -> dict[str, int]:
        """Counts shown above a vehicle's or customer's contract list."""
        names = [(c.get("status") or {}).get("name") for c in contracts]
        return {
            "total": total,
            "active": names.count(ContractStatusName.ACTIVE.value),
            "onHold": names.count(ContractStatusName.ON_HOLD.value),
            "closed": names.count(ContractStatusName.CLOSED.value),
        }

    # -------------------------------------------------------------------------
    # Status Transitions
    # -------------------------------------------------------------------------

    @staticmethod
    def _current_status_name(contract: dict[str, Any]) -> str | None:
        if not contract.get("status_id"):
            return None
        status = SupabaseClient.fetch_by_id("contract_statuses", contract["status_id"], columns="id, name")
        return status.get("name") if status else None

    @staticmethod
    def _guard_transition(contract: dict[str, Any], target: ContractStatusName | None) -> None:
        """
        Reject actions on closed/cancelled contracts, and re-holding a held one.

        Args:
            target: The status being moved to, or None for an extension
        """
        current = ContractService._current_status_name(contract)
        if current in TERMINAL_STATUSES:
            raise InvalidStateTransitionError(f"Contract is already {current.lower()}", current_status=current)
        if target == ContractStatusName.ON_HOLD and current == ContractStatusName.ON_HOLD.value:
            raise InvalidStateTransitionError("Contract is already on hold", current_status=current)

    @staticmethod
    def _release_vehicle(vehicle_id: str | None, user_id: UUID | str) -> None:
        """Set the contract's vehicle back to Available, logging any failure."""
        if not vehicle_id:
            return
        try:
            status_id = SupabaseClient.find_id_by_name("vehicle_statuses", AVAILABLE_VEHICLE_STATUS)
            if not status_id:
                logger.warning(f"No '{AVAILABLE_VEHICLE_STATUS}' vehicle status configured; vehicle {vehicle_id} not released")
                return

            client = SupabaseClient.get_client()
            (
                client.table("vehicles")
                .update({"status_id": status_id, "updated_at": utc_now_iso()})
                .eq("id", str(vehicle_id))
                .eq("user_id", str(user_id))
                .execute()
            )
            logger.info(f"Released vehicle {vehicle_id}")
        except Exception as e:
            logger.warning(f"Failed to release vehicle {vehicle_id}: {e}")

    @staticmethod
    def _transition(
        contract_id: str | UUID,
        user_id: UUID | str,
        target: ContractStatusName,
        prefix: str,
        reason: str,
        comments: str | None,
        release_vehicle: bool,
    ) -> dict[str, Any]:
        contract_id = str(contract_id)
        contract = ContractService._fetch_contract(
            contract_id,
            user_id,
            columns="id, status_id, selected_vehicle_id",
        )
        ContractService._guard_transition(contract, target)

        status_id = SupabaseClient.find_id_by_name("contract_statuses", target.value)
        if not status_id:
            raise StatusNotConfiguredError(target.value, "contract_statuses")

        now = utc_now_iso()
        updates = {
            "status_id": status_id,
            f"{prefix}_reason": reason,
            f"{prefix}_comments": comments or None,
            f"{prefix}_date": now,
            "updated_at": now,
            "updated_by": str(user_id),
        }

        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("contracts")
                .update(updates)
                .eq("id", contract_id)
                .eq("user_id", str(user_id))
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to set contract {contract_id} to {target.value}: {e}")
            raise DatabaseError("update contract status", str(e))

        logger.info(f"Contract {contract_id} -> {target.value}")

        if release_vehicle:
            ContractService._release_vehicle(contract.get("selected_vehicle_id"), user_id)

        return response.data[0]

    @staticmethod
    def hold_contract(contract_id: str | UUID, user_id: UUID | str, reason: str, comments: str | None = None) -> dict[str, Any]:
        """Put a contract on hold. The vehicle stays with the customer."""
        return ContractService._transition(
            contract_id, user_id, ContractStatusName.ON_HOLD, "hold", reason, comments, release_vehicle=False
        )

    @staticmethod
    def close_contract(contract_id: str | UUID, user_id: UUID | str, reason: str, comments: str | None = None) -> dict[str, Any]:
        """Close a contract and release its vehicle."""
        return ContractService._transition(
            contract_id, user_id, ContractStatusName.CLOSED, "close", reason, comments, release_vehicle=True
        )

    @staticmethod
    def cancel_contract(contract_id: str | UUID, user_id: UUID | str, reason: str, comments: str | None = None) -> dict[str, Any]:
        """Cancel a contract and release its vehicle."""
        return ContractService._transition(
            contract_id, user_id, ContractStatusName.CANCELLED, "cancel", reason, comments, release_vehicle=True
        )

    # -------------------------------------------------------------------------
    # Extension
    # -------------------------------------------------------------------------

    @staticmethod
    def extend_contract(
        contract_id: str | UUID,
        request: ExtensionRequest,
        user_id: UUID | str,
    ) -> dict[str, Any]:
        """
        Push a contract's end date out.

        A "duration" extension adds duration_days. A "fees" extension adds
        ceil(fee_amount / daily_rental_rate) days.

        Raises:
            InvalidStateTransitionError: If the contract is closed or cancelled
            ValidationFailedError: If fees are given but the contract has no daily rate
        """
        contract_id = str(contract_id)
        contract = ContractService._fetch_contract(contract_id, user_id)
        ContractService._guard_transition(contract, None)

        if request.extension_type == ExtensionType.DURATION:
            days = request.duration_days
        else:
            days = days_from_fees(request.fee_amount, contract.get("daily_rental_rate"))
            if days <= 0:
                raise ValidationFailedError("Contract has no daily rental rate to convert fees into days")

        current_end = parse_date(contract.get("end_date"))
        if current_end is None:
            raise ValidationFailedError("Contract has no valid end date to extend")

        new_end = current_end + timedelta(days=days)
        now = utc_now_iso()
        updates = {
            "end_date": new_end.isoformat(),
            "extension_type": request.extension_type.value,
            "extension_fee_amount": request.fee_amount if request.extension_type == ExtensionType.FEES else None,
            "extension_duration_days": days,
            "extension_payment_method": request.payment_method,
            "extension_date": now,
            "updated_at": now,
            "updated_by": str(user_id),
        }

        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("contracts")
                .update(updates)
                .eq("id", contract_id)
                .eq("user_id", str(user_id))
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to extend contract {contract_id}: {e}")
            raise DatabaseError("extend contract", str(e))

        logger.info(f"Extended contract {contract_id} by {days} day(s) to {new_end.isoformat()}")
        return response.data[0]

    # -------------------------------------------------------------------------
    # Printable View
    # -------------------------------------------------------------------------

    @staticmethod
    def build_print_view(contract_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        """
        Display strings for the printable contract.

        The client lays these out and renders the PDF; the server decides
        what is printed and how values are formatted.
        """
        contract = ContractService.get_contract(contract_id, user_id)
        customer = contract.get("customer") or {}
        currency = settings.DEFAULT_CURRENCY
        number = contract.get("contract_number") or str(contract["id"])[:8].upper()

        def line(label: str, value: Any) -> dict[str, str]:
            return {"label": label, "value": "N/A" if value in (None, "") else str(value)}

        sections = [
            {
                "heading": "Contract",
                "lines": [
                    line("Contract Number", number),
                    line("Tajeer Number", contract.get("tajeer_number")),
                    line("Type", contract.get("type")),
                    line("Status", (contract.get("status") or {}).get("name")),
                    line("Start Date", contract.get("start_date")),
                    line("End Date", contract.get("end_date")),
                    line("Rental Days", contract.get("rental_days")),
                ],
            },
            {
                "heading": "Customer",
                "lines": [
                    line("Name", customer.get("name") or contract.get("customer_name")),
                    line("ID Type", customer.get("id_type") or contract.get("customer_id_type")),
                    line("ID Number", customer.get("id_number") or contract.get("customer_id_number")),
                    line("Mobile", customer.get("mobile_number")),
                    line("Address", customer.get("address") or contract.get("customer_address")),
                ],
            },
            {
                "heading": "Vehicle",
                "lines": [
                    line("Plate Number", contract.get("vehicle_plate")),
                    line("Serial Number", contract.get("vehicle_serial_number")),
                    line("Current KM", contract.get("current_km")),
                    line("Permitted Daily KM", contract.get("permitted_daily_km")),
                ],
            },
            {
                "heading": "Pricing",
                "lines": [
                    line("Daily Rental Rate", format_currency(contract.get("daily_rental_rate"), currency)),
                    line("Hourly Delay Rate", format_currency(contract.get("hourly_delay_rate"), currency)),
                    line("Excess KM Rate", format_currency(contract.get("excess_km_rate"), currency)),
                    line("Insurance", contract.get("insurance_type")),
                    line("Payment Method", contract.get("payment_method")),
                    line("Total Amount", format_currency(contract.get("total_amount"), currency)),
                ],
            },
        ]

        return {
            "title": f"Rental Contract {number}",
            "filename": f"contract-{number}.pdf",
            "sections": sections,
        }
